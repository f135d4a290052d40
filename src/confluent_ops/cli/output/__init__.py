"""CLI output utilities.

Usage:
    from confluent_ops.cli.output import Table

    table = Table(title="Clusters")
    table.add_column("Name", style="cyan")
    table.add_row("orders")
    console.print(table)
"""

from confluent_ops.cli.output.table import Table, render_rows

__all__ = ["Table", "render_rows"]
