"""Voter roll lookup: schema-tolerant query and aggregation engine."""

__version__ = "0.1.0"
