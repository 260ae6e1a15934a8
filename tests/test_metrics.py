import pytest

from mysqlexporter.metrics import Desc, Metric, ValueType, build_fq_name


def test_build_fq_name_joins_all_parts():
    assert build_fq_name("mysql", "binlog", "size_bytes") == "mysql_binlog_size_bytes"


def test_build_fq_name_skips_empty_subsystem():
    assert build_fq_name("mysql", "", "up") == "mysql_up"


def test_build_fq_name_empty_name_gives_empty():
    assert build_fq_name("mysql", "binlog", "") == ""


def test_build_fq_name_without_namespace():
    parts = ("", "sub", "name")
    assert build_fq_name(*parts) == "_".join(p for p in parts if p)


def test_metric_binds_label_values_in_order():
    desc = Desc("mysql_test_metric", "Help.", ("first", "second"))
    metric = desc.metric(ValueType.COUNTER, 3, "a", "b")
    assert metric.labels == {"first": "a", "second": "b"}
    assert metric.value == 3.0
    assert metric.value_type is ValueType.COUNTER
    assert metric.desc is desc


def test_metric_name_is_desc_name():
    desc = Desc("mysql_named", "Help.")
    metric = desc.metric(ValueType.GAUGE, 1.5)
    assert metric.name == desc.fq_name
    assert metric.labels == {}


def test_metric_accepts_value_type_string():
    metric = Desc("mysql_x", "Help.").metric("untyped", 2)
    assert metric.value_type is ValueType.UNTYPED


def test_metric_wrong_label_count_raises():
    desc = Desc("mysql_x", "Help.", ("a",))
    with pytest.raises(ValueError):
        desc.metric(ValueType.GAUGE, 1)
    with pytest.raises(ValueError):
        desc.metric(ValueType.GAUGE, 1, "x", "y")


@pytest.mark.parametrize("name", ["", "1abc", "a-b", "a b"])
def test_invalid_metric_name_raises(name):
    with pytest.raises(ValueError):
        Desc(name, "Help.")


@pytest.mark.parametrize("labels", [("__reserved",), ("a-b",), ("1x",), ("dup", "dup")])
def test_invalid_label_names_raise(labels):
    with pytest.raises(ValueError):
        Desc("mysql_x", "Help.", labels)


def test_desc_equality_and_label_tuple():
    first = Desc("mysql_x", "Help.", ["a", "b"])
    second = Desc("mysql_x", "Help.", ("a", "b"))
    assert first == second
    assert first.variable_labels == ("a", "b")


def test_metric_equality():
    desc = Desc("mysql_x", "Help.", ("a",))
    assert desc.metric(ValueType.GAUGE, 1, "v") == Metric(desc, ValueType.GAUGE, 1.0, {"a": "v"})