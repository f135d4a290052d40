"""Command line interface for confluent-ops."""
