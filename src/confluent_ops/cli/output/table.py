"""Table output for CLI commands.

Wraps Rich's Table so every listing folds long values (endpoints, IDs)
instead of truncating them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from rich.table import Table as RichTable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

OverflowMethod = Literal["fold", "crop", "ellipsis", "ignore"]


class Table(RichTable):
    """Rich Table whose columns fold overflowing text by default."""

    def add_column(  # type: ignore[override]
        self,
        header: str = "",
        *,
        style: str | None = None,
        overflow: OverflowMethod = "fold",
        no_wrap: bool = False,
        **kwargs: Any,
    ) -> None:
        """Add a column with overflow="fold" unless told otherwise."""
        super().add_column(header, style=style, overflow=overflow, no_wrap=no_wrap, **kwargs)


def render_rows(
    title: str,
    columns: Sequence[tuple[str, str]],
    rows: Iterable[Mapping[str, Any]],
) -> Table:
    """Build a table from ``(key, header)`` column pairs and row mappings.

    Missing and None values render as an empty cell.
    """
    table = Table(title=title)
    for index, (_, header) in enumerate(columns):
        table.add_column(header, style="cyan" if index == 0 else None, no_wrap=index == 0)
    for row in rows:
        table.add_row(*("" if row.get(key) is None else str(row.get(key)) for key, _ in columns))
    return table
