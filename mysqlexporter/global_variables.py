"""Scrape ``SHOW GLOBAL VARIABLES``."""

from __future__ import annotations

import re
from typing import Any, Iterator

from .collector import (
    NAMESPACE,
    Scraper,
    _text,
    fetch_rows,
    new_desc,
    parse_status,
    valid_prometheus_name,
)
from .metrics import Desc, Metric, ValueType, build_fq_name

SUBSYSTEM = "global_variables"
GLOBAL_VARIABLES_QUERY = "SHOW GLOBAL VARIABLES"
GENERIC_HELP = "Generic gauge metric from SHOW GLOBAL VARIABLES."

# Help for MyRocks server variables, keyed without their "rocksdb_" prefix.
_ROCKSDB_HELP = (
    ("access_hint_on_compaction_start", "File access pattern once a compaction is started, applied to all input files of a compaction."),
    ("advise_random_on_open", "Hint of random access to the filesystem when a data file is opened."),
    ("allow_concurrent_memtable_write", "Allow multi-writers to update memtables in parallel."),
    ("allow_mmap_reads", "Allow the OS to mmap a data file for reads."),
    ("allow_mmap_writes", "Allow the OS to mmap a data file for writes."),
    ("block_cache_size", "Size of the LRU block cache in RocksDB. This memory is reserved for the block cache, which is in addition to any filesystem caching that may occur."),
    ("block_restart_interval", "Number of keys for each set of delta encoded data."),
    ("block_size_deviation", "If the percentage of free space in the current data block (size specified in rocksdb-block-size) is less than this amount, close the block (and write record to new block)."),
    ("block_size", "Size of the data block for reading sst files."),
    ("bulk_load_size", "Sets the number of keys to accumulate before committing them to the storage engine during bulk loading."),
    ("bulk_load", "When set, MyRocks will ignore checking keys for uniqueness or acquiring locks during transactions. This option should only be used when the application is certain there are no row conflicts, such as when setting up a new MyRocks instance from an existing MySQL dump."),
    ("bytes_per_sync", "Enables the OS to sync out file writes as data files are created."),
    ("cache_index_and_filter_blocks", "Requests RocksDB to use the block cache for caching the index and bloomfilter data blocks from each data file. If this is not set, RocksDB will allocate additional memory to maintain these data blocks."),
    ("checksums_pct", "Sets the percentage of rows to calculate and set MyRocks checksums."),
    ("collect_sst_properties", "Enables collecting statistics of each data file for improving optimizer behavior."),
    ("commit_in_the_middle", "Commit rows implicitly every rocksdb-bulk-load-size, during bulk load/insert/update/deletes."),
    ("compaction_readahead_size", "When non-zero, bigger reads are performed during compaction. Useful if running RocksDB on spinning disks, compaction will do sequential instead of random reads."),
    ("compaction_sequential_deletes_count_sd", "If enabled, factor in single deletes as part of rocksdb-compaction-sequential-deletes."),
    ("compaction_sequential_deletes_file_size", "Threshold to trigger compaction if the number of sequential keys that are all delete markers exceed this value. While this compaction helps reduce request latency by removing delete markers, it can increase write rates of RocksDB."),
    ("compaction_sequential_deletes_window", "Threshold to trigger compaction if, within a sliding window of keys, there exists this parameter's number of delete marker."),
    ("compaction_sequential_deletes", "Enables triggering of compaction when the number of delete markers in a data file exceeds a certain threshold. Depending on workload patterns, RocksDB can potentially maintain large numbers of delete markers and increase latency of all queries."),
    ("create_if_missing", "Allows creating the RocksDB database if it does not exist."),
    ("create_missing_column_families", "Allows creating new column families if they did not exist."),
    ("db_write_buffer_size", "Size of the memtable used to store writes within RocksDB. This is the size per column family. Once this size is reached, a flush of the memtable to persistent media occurs."),
    ("deadlock_detect", "Enables deadlock detection in RocksDB."),
    ("debug_optimizer_no_zero_cardinality", "Test only to prevent MyRocks from calculating cardinality."),
    ("delayed_write_rate", "When RocksDB hits the soft limits/thresholds for writes, such as soft_pending_compaction_bytes_limit being hit, or level0_slowdown_writes_trigger being hit, RocksDB will slow the write rate down to the value of this parameter as bytes/second."),
    ("delete_obsolete_files_period_micros", "The periodicity of when obsolete files get deleted, but does not affect files removed through compaction."),
    ("enable_bulk_load_api", "Enables using the SSTFileWriter feature in RocksDB, which bypasses the memtable, but this requires keys to be inserted into the table in either ascending or descending order. If disabled, bulk loading uses the normal write path via the memtable and does not keys to be inserted in any order."),
    ("enable_thread_tracking", "Set to allow RocksDB to track the status of threads accessing the database."),
    ("enable_write_thread_adaptive_yield", "Set to allow RocksDB write batch group leader to wait up to the max time allowed before blocking on a mutex, allowing an increase in throughput for concurrent workloads."),
    ("error_if_exists", "If set, reports an error if an existing database already exists."),
    ("flush_log_at_trx_commit", "Sync'ing on transaction commit similar to innodb-flush-log-at-trx-commit: 0 - never sync, 1 - always sync, 2 - sync based on a timer controlled via rocksdb-background-sync"),
    ("flush_memtable_on_analyze", "When analyze table is run, determines of the memtable should be flushed so that data in the memtable is also used for calculating stats."),
    ("force_compute_memtable_stats", "When enabled, also include data in the memtables for index statistics calculations used by the query optimizer. Greater accuracy, but requires more cpu."),
    ("force_flush_memtable_now", "Triggers MyRocks to flush the memtables out to the data files."),
    ("force_index_records_in_range", "When force index is used, a non-zero value here will be used as the number of rows to be returned to the query optimizer when trying to determine the estimated number of rows."),
    ("hash_index_allow_collision", "Enables RocksDB to allow hashes to collide (uses less memory). Otherwise, the full prefix is stored to prevent hash collisions."),
    ("keep_log_file_num", "Sets the maximum number of info LOG files to keep around."),
    ("lock_scanned_rows", "If enabled, rows that are scanned during UPDATE remain locked even if they have not been updated."),
    ("lock_wait_timeout", "Sets the number of seconds MyRocks will wait to acquire a row lock before aborting the request."),
    ("log_file_time_to_roll", "Sets the number of seconds a info LOG file captures before rolling to a new LOG file."),
    ("manifest_preallocation_size", "Sets the number of bytes to preallocate for the MANIFEST file in RocksDB and reduce possible random I/O on XFS. MANIFEST files are used to store information about column families, levels, active files, etc."),
    ("max_open_files", "Sets a limit on the maximum number of file handles opened by RocksDB."),
    ("max_row_locks", "Sets a limit on the maximum number of row locks held by a transaction before failing it."),
    ("max_subcompactions", "For each compaction job, the maximum threads that will work on it simultaneously (i.e. subcompactions). A value of 1 means no subcompactions."),
    ("max_total_wal_size", "Sets a limit on the maximum size of WAL files kept around. Once this limit is hit, RocksDB will force the flushing of memtables to reduce the size of WAL files."),
    ("merge_buf_size", "Size (in bytes) of the merge buffers used to accumulate data during secondary key creation. During secondary key creation the data, we avoid updating the new indexes through the memtable and L0 by writing new entries directly to the lowest level in the database. This requires the values to be sorted so we use a merge/sort algorithm. This setting controls how large the merge buffers are. The default is 64Mb."),
    ("merge_combine_read_size", "Size (in bytes) of the merge combine buffer used in the merge/sort algorithm as described in rocksdb-merge-buf-size."),
    ("new_table_reader_for_compaction_inputs", "Indicates whether RocksDB should create a new file descriptor and table reader for each compaction input. Doing so may use more memory but may allow pre-fetch options to be specified for compaction input files without impacting table readers used for user queries."),
    ("no_block_cache", "Disables using the block cache for a column family."),
    ("paranoid_checks", "Forces RocksDB to re-read a data file that was just created to verify correctness."),
    ("pause_background_work", "Test only to start and stop all background compactions within RocksDB."),
    ("perf_context_level", "Sets the level of information to capture via the perf context plugins."),
    ("persistent_cache_size_mb", "The size (in Mb) to allocate to the RocksDB persistent cache if desired."),
    ("pin_l0_filter_and_index_blocks_in_cache", "If rocksdb-cache-index-and-filter-blocks is true then this controls whether RocksDB 'pins' the filter and index blocks in the cache."),
    ("print_snapshot_conflict_queries", "If this is true, MyRocks will log queries that generate snapshot conflicts into the .err log."),
    ("rate_limiter_bytes_per_sec", "Controls the rate at which RocksDB is allowed to write to media via memtable flushes and compaction."),
    ("records_in_range", "Test only to override the value returned by records-in-range."),
    ("seconds_between_stat_computes", "Sets the number of seconds between recomputation of table statistics for the optimizer."),
    ("signal_drop_index_thread", "Test only to signal the MyRocks drop index thread."),
    ("skip_bloom_filter_on_read", "Indicates whether the bloom filters should be skipped on reads."),
    ("skip_fill_cache", "Requests MyRocks to skip caching data on read requests."),
    ("stats_dump_period_sec", "Sets the number of seconds to perform a RocksDB stats dump to the info LOG files."),
    ("store_row_debug_checksums", "Include checksums when writing index/table records."),
    ("strict_collation_check", "Enables MyRocks to check and verify table indexes have the proper collation settings."),
    ("table_cache_numshardbits", "Sets the number of table caches within RocksDB."),
    ("use_adaptive_mutex", "Enables adaptive mutexes in RocksDB which spins in user space before resorting to the kernel."),
    ("use_direct_reads", "Enable direct IO when opening a file for read/write. This means that data will not be cached or buffered."),
    ("use_fsync", "Requires RocksDB to use fsync instead of fdatasync when requesting a sync of a data file."),
    ("validate_tables", "Requires MyRocks to verify all of MySQL's .frm files match tables stored in RocksDB."),
    ("verify_row_debug_checksums", "Verify checksums when reading index/table records."),
    ("wal_bytes_per_sync", "Controls the rate at which RocksDB writes out WAL file data."),
    ("wal_recovery_mode", "Sets RocksDB's level of tolerance when recovering the WAL files after a system crash."),
    ("wal_size_limit_mb", "Maximum size the RocksDB WAL is allow to grow to. When this size is exceeded rocksdb attempts to flush sufficient memtables to allow for the deletion of the oldest log."),
    ("wal_ttl_seconds", "No WAL file older than this value should exist."),
    ("whole_key_filtering", "Enables the bloomfilter to use the whole key for filtering instead of just the prefix. In order for this to be efficient, lookups should use the whole key for matching."),
    ("write_disable_wal", "Disables logging data to the WAL files. Useful for bulk loading."),
    ("write_ignore_missing_column_families", "If 1, then writes to column families that do not exist is ignored by RocksDB."),
)

# Help strings for known variables; anything else gets GENERIC_HELP.
GLOBAL_VARIABLES_HELP = {f"rocksdb_{suffix}": text for suffix, text in _ROCKSDB_HELP}

VERSION_INFO_DESC = Desc(
    build_fq_name(NAMESPACE, "version", "info"),
    "MySQL version and distribution.",
    ("innodb_version", "version", "version_comment"),
)
SERVER_INFO_DESC = Desc(
    build_fq_name(NAMESPACE, "server", "info"),
    "MySQL version and distribution.",
    ("uuid", "id", "version", "os", "arch"),
)
GALERA_VARIABLES_INFO_DESC = Desc(
    build_fq_name(NAMESPACE, "galera", "variables_info"),
    "PXC/Galera variables information.",
    ("wsrep_cluster_name",),
)
GALERA_GCACHE_SIZE_DESC = new_desc("galera", "gcache_size_bytes", "PXC/Galera gcache size.")
TRANSACTION_ISOLATION_DESC = Desc(
    build_fq_name(NAMESPACE, "transaction", "isolation"),
    "MySQL transaction isolation.",
    ("level",),
)

_TEXT_ITEMS = (
    "innodb_version",
    "version",
    "version_comment",
    "wsrep_cluster_name",
    "wsrep_provider_options",
    "tx_isolation",
    "transaction_isolation",
    "server_uuid",
    "server_id",
    "version_compile_os",
    "version_compile_machine",
)

_GCACHE_SIZE_RE = re.compile(r"gcache.size = (\d+)([MG]?);", re.ASCII)
_GCACHE_UNITS = {"": 1, "M": 1024 * 1024, "G": 1024 * 1024 * 1024}


def parse_wsrep_provider_options(opts: str) -> float:
    """Return gcache.size in bytes from wsrep_provider_options, or 0 if absent."""
    match = _GCACHE_SIZE_RE.search(opts)
    if match is None:
        return 0.0
    return float(match[1]) * _GCACHE_UNITS[match[2]]


class ScrapeGlobalVariables(Scraper):
    """Collects numeric server variables plus version and Galera information."""

    name = SUBSYSTEM
    help = "Collect from SHOW GLOBAL VARIABLES"
    version = 5.1

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch_rows(db, GLOBAL_VARIABLES_QUERY)
        text_items = dict.fromkeys(_TEXT_ITEMS, "")

        for row in rows:
            if len(row) != 2:
                raise ValueError(f"expected 2 columns, got {len(row)}")
            key = valid_prometheus_name(_text(row[0]))
            raw_value = row[1]
            value = parse_status(raw_value)
            if value is not None:
                help_text = GLOBAL_VARIABLES_HELP.get(key) or GENERIC_HELP
                yield new_desc(SUBSYSTEM, key, help_text).metric(ValueType.GAUGE, value)
            if key in text_items:
                text_items[key] = _text(raw_value)

        yield VERSION_INFO_DESC.metric(
            ValueType.GAUGE,
            1,
            text_items["innodb_version"],
            text_items["version"],
            text_items["version_comment"],
        )
        yield SERVER_INFO_DESC.metric(
            ValueType.GAUGE,
            1,
            text_items["server_uuid"],
            text_items["server_id"],
            text_items["version"],
            text_items["version_compile_os"],
            text_items["version_compile_machine"],
        )

        if text_items["wsrep_cluster_name"]:
            yield GALERA_VARIABLES_INFO_DESC.metric(
                ValueType.GAUGE, 1, text_items["wsrep_cluster_name"]
            )

        if text_items["wsrep_provider_options"]:
            yield GALERA_GCACHE_SIZE_DESC.metric(
                ValueType.GAUGE,
                parse_wsrep_provider_options(text_items["wsrep_provider_options"]),
            )

        level = text_items["transaction_isolation"] or text_items["tx_isolation"]
        if level:
            yield TRANSACTION_ISOLATION_DESC.metric(ValueType.GAUGE, 1, level)