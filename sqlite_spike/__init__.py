"""Storage-size and timing micro-benchmarks for SQLite database files."""

__version__ = "0.1.0"
