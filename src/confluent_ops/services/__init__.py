"""Service layer for resource reconciliation."""
