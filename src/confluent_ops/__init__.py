"""Confluent Cloud resource reconciliation client."""

__version__ = "0.1.0"
