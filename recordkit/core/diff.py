"""
RecordDiff: item-level comparison of two Records.

Differences are collected in a Grid with one row per finding
(name, status, description). Cells that were added, deleted or changed
are kept so they can be retrieved by status afterwards.
"""

from typing import Dict, Optional

from recordkit.core.data import (
    DIFF_STATUS_ADDED, DIFF_STATUS_DELETED, DIFF_STATUS_UPDATED,
)
from recordkit.core.grid import Grid
from recordkit.core.item import ValueCellBuilder, ValueCell
from recordkit.core.record import Record


class RecordDiff:
    """
    Compares two Records item by item.

    Example:
        diff = RecordDiff()
        diff.compare(before, after)
        if not diff.is_equal():
            added = diff.changed_items(DIFF_STATUS_ADDED)
    """

    def __init__(self, compare_features: bool = False):
        """
        Initialize the comparison.

        Args:
            compare_features: Also report feature differences
        """
        self.compare_features = compare_features
        self.is_compared = False
        self._cells: Dict[str, ValueCell] = {}
        self.details = Grid("Data Doc Differences")
        self.details.add_col(ValueCellBuilder().name("name").title("Name").build())
        self.details.add_col(ValueCellBuilder().name("status").title("Status").build())
        self.details.add_col(ValueCellBuilder().name("description").title("Description").build())

    def reset(self) -> None:
        self.is_compared = False
        self.details.empty_rows()
        self._cells.clear()

    def _add(self, name: str, status: str, description: str, cell: Optional[ValueCell] = None) -> None:
        if cell is not None:
            self._cells[cell.name] = cell
        self.details.new_row()
        self.details.set_value_by_name("name", name)
        self.details.set_value_by_name("status", status)
        self.details.set_value_by_name("description", description)
        self.details.add_row()

    @staticmethod
    def _features_differ(first: Dict[str, str], second: Dict[str, str]) -> bool:
        if len(first) != len(second):
            return True
        return any(second.get(name) != value for name, value in first.items())

    def compare_items(self, first: ValueCell, second: ValueCell) -> None:
        """Record every metadata and value difference between two cells."""
        name = first.name
        if first.type != second.type:
            self._add(name, DIFF_STATUS_UPDATED, "Item data type differs.")
        if first.title != second.title:
            self._add(name, DIFF_STATUS_UPDATED, "Item title differs.")
        if first.display_size != second.display_size:
            self._add(name, DIFF_STATUS_UPDATED, "Item display size differs.")
        if first.sort_order != second.sort_order:
            self._add(name, DIFF_STATUS_UPDATED, "Item sort order differs.")
        if first.is_range_assigned() != second.is_range_assigned():
            self._add(name, DIFF_STATUS_UPDATED, "Item ranges differ.")
        elif first.is_range_assigned() and not first.range.is_equal(second.range):
            self._add(name, DIFF_STATUS_UPDATED, "Item ranges differ.")
        if not first.is_value_equal(second):
            self._add(name, DIFF_STATUS_UPDATED, "Item values differ.", second)
        if self.compare_features and self._features_differ(first.features, second.features):
            self._add(name, DIFF_STATUS_UPDATED, "Item features differ.")

    def compare(self, first: Record, second: Record) -> 'RecordDiff':
        """
        Compare two records, replacing any earlier result.

        Items only present in the first record are reported as Deleted,
        items only present in the second as Added.
        """
        self.reset()
        if first is None or second is None:
            return self

        if first.name != second.name:
            self._add(first.name, DIFF_STATUS_UPDATED, "Document names differ.")
        if first.title != second.title:
            self._add(first.name, DIFF_STATUS_UPDATED, "Document titles differ.")
        if first.action != second.action:
            self._add(first.name, DIFF_STATUS_UPDATED, "Document actions differ.")
        if self.compare_features and self._features_differ(first.features, second.features):
            self._add(first.name, DIFF_STATUS_UPDATED, "Document features differ.")

        for cell in first:
            other = second.get_item_by_name_optional(cell.name)
            if other is None:
                self._add(cell.name, DIFF_STATUS_DELETED, "Item not found in second document.", cell)
            else:
                self.compare_items(cell, other)

        for cell in second:
            if cell.name not in first:
                self._add(cell.name, DIFF_STATUS_ADDED, "Item added to second document.", cell)

        self.is_compared = True
        return self

    def is_equal(self) -> bool:
        return self.is_compared and self.details.row_count() == 0

    def status_count(self, status: str) -> int:
        return sum(1 for row in self.details.rows if row.get("status") == [status])

    def changed_items(self, status: str) -> Optional[Record]:
        """
        Cells reported with the given status, collected in a Record.

        Returns:
            Record named "<status> Items", or None when nothing matches
        """
        if not self.is_compared:
            return None
        changed = Record(f"{status} Items")
        for row in self.details.rows:
            if row.get("status") != [status]:
                continue
            names = row.get("name", [])
            cell = self._cells.get(names[0]) if names else None
            if cell is not None:
                changed.add(cell)
        return changed if changed.count() > 0 else None
