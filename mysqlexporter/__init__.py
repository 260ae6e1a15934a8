"""Scrapers that read MySQL server statistics as Prometheus-style metrics."""

__version__ = "0.1.0"