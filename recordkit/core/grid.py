"""
Grid: tabular rows over a Record schema.

The columns of a Grid are a Record whose cells describe name, type and
features of each column (their values are always cleared). Each row is a
mapping of column name to a list of string values. Rows are stored as
snapshots: records handed out by the grid are copies, and changes only
reach the grid through update_row() or update().
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional
import logging
import math

import numpy as np

from recordkit.core.data import (
    DataType, SortOrder, FEATURE_IS_PRIMARY, VALIDATION_MESSAGE_ITEM_CHANGED,
    is_date_or_time, is_number,
)
from recordkit.core.features import FeatureMixin
from recordkit.core.item import ValueCell
from recordkit.core.record import ComparisonResult, Record
from recordkit.exceptions import NotFoundError, SchemaError

logger = logging.getLogger(__name__)

Row = Dict[str, List[str]]


@dataclass(frozen=True)
class ColumnStatistics:
    """Descriptive statistics of one numeric column."""
    name: str
    count: int
    mean: float
    std_dev: float
    minimum: float
    maximum: float
    total: float
    median: float

    @classmethod
    def empty(cls, name: str) -> 'ColumnStatistics':
        nan = math.nan
        return cls(name, 0, nan, nan, nan, nan, 0.0, nan)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'count': self.count,
            'mean': self.mean,
            'std_dev': self.std_dev,
            'min': self.minimum,
            'max': self.maximum,
            'sum': self.total,
            'median': self.median,
        }


class Grid(FeatureMixin):
    """
    Rows of values conforming to a column schema.

    Example:
        grid = Grid("people")
        grid.add_col(ValueCellBuilder().name("id").type(DataType.INTEGER).is_primary().build())
        grid.add_col(ValueCellBuilder().name("name").type(DataType.TEXT).build())

        grid.new_row()
        grid.set_value_by_name("id", 1)
        grid.set_value_by_name("name", "Ada")
        grid.add_row()

        grid.get_row_as_record(0).get_value_by_name("name")  # "Ada"
    """

    def __init__(self, name: str = "", columns: Optional[Record] = None):
        """
        Initialize a Grid.

        Args:
            name: Grid name (taken from the schema when empty)
            columns: Schema record; its values are cleared
        """
        self._init_features()
        self.name = name
        self.columns = Record(name)
        self.rows: List[Row] = []
        self._new_row: Optional[Row] = None
        if columns is not None:
            self.set_columns(columns)

    @classmethod
    def from_records(cls, name: str, records: List[Record]) -> 'Grid':
        """Build a grid whose schema is derived from the first record."""
        grid = cls(name)
        for record in records:
            grid.add_row(record)
        return grid

    def copy(self) -> 'Grid':
        clone = Grid(self.name, self.columns)
        clone.rows = [_copy_row(row) for row in self.rows]
        clone.features = dict(self.features)
        return clone

    # ========================================
    # Columns
    # ========================================

    def set_columns(self, columns: Record) -> None:
        """
        Replace the schema.

        Raises:
            SchemaError: If the grid already holds rows
        """
        if self.rows:
            raise SchemaError(f"Grid '{self.name}' has {len(self.rows)} rows, columns are fixed")
        schema = columns.copy()
        schema.reset_values()
        self.columns = schema
        if not self.name:
            self.name = columns.name
        logger.debug("Grid '%s' schema set to %d columns", self.name, schema.count())

    def add_col(self, cell: ValueCell) -> bool:
        """
        Append a column while the grid is empty.

        Returns:
            True if added, False when rows already exist
        """
        if self.rows:
            return False
        column = cell.copy()
        column.clear_values()
        self.columns.add(column)
        return True

    def col_count(self) -> int:
        return self.columns.count()

    def row_count(self) -> int:
        return len(self.rows)

    def column_names(self) -> List[str]:
        return self.columns.item_names()

    # ========================================
    # Staged row
    # ========================================

    def new_row(self) -> Row:
        """Start a staged row filled with the column default values."""
        self._new_row = {}
        for column in self.columns:
            self._new_row[column.name] = [column.default_value] if column.default_value else []
        return self._new_row

    def _cell_values(self, name: str, value: Any) -> List[str]:
        column = self.columns.get_item_by_name(name)
        cell = column.copy()
        cell.set_value(value)
        return list(cell.values)

    def set_value_by_name(self, name: str, value: Any) -> None:
        """
        Assign a value in the staged row, starting one if needed.

        Raises:
            NotFoundError: If the column does not exist
        """
        if self._new_row is None:
            self.new_row()
        self._new_row[name] = self._cell_values(name, value)

    def set_values_by_name(self, name: str, values: List[Any]) -> None:
        if self._new_row is None:
            self.new_row()
        column = self.columns.get_item_by_name(name).copy()
        column.set_values(values)
        self._new_row[name] = list(column.values)

    # ========================================
    # Row Operations
    # ========================================

    def _record_to_row(self, record: Record) -> Row:
        row: Row = {}
        for cell in record:
            if cell.name in self.columns:
                row[cell.name] = list(cell.values)
        return row

    def add_row(self, record: Optional[Record] = None) -> bool:
        """
        Append a row.

        Without an argument the staged row is committed. With a record, its
        values are copied; the first record added to a grid without
        columns defines the schema.

        Returns:
            True if a row was appended
        """
        if record is None:
            if self._new_row is None:
                return False
            self.rows.append(self._new_row)
            self._new_row = None
            return True

        if record.count() == 0:
            return False
        if self.columns.count() == 0:
            self.set_columns(record)
        self.rows.append(self._record_to_row(record))
        return True

    def add_rows(self, other: 'Grid') -> bool:
        """
        Merge the rows of another grid with an identical schema.

        When the schema flags a primary key, rows whose key value is
        already present are skipped.

        Returns:
            True if at least one row was added
        """
        if other is None or other.row_count() == 0:
            return False
        if self.columns.generate_unique_hash(True) != other.columns.generate_unique_hash(True):
            logger.debug("Grid '%s' rejected rows from '%s': schema differs", self.name, other.name)
            return False

        primary = other.columns.get_first_item_by_feature_name(FEATURE_IS_PRIMARY)
        known = set()
        if primary is not None:
            known = {tuple(row.get(primary.name, [])) for row in self.rows}

        starting_count = self.row_count()
        for row in other.rows:
            if primary is not None:
                key = tuple(row.get(primary.name, []))
                if key in known:
                    logger.debug("Grid '%s' skipped duplicate key %s", self.name, list(key))
                    continue
                known.add(key)
            self.rows.append(_copy_row(row))
        return self.row_count() > starting_count

    def _in_range(self, offset: int) -> bool:
        return 0 <= offset < len(self.rows)

    def insert_row(self, offset: int, record: Record) -> bool:
        """Insert a row before an existing offset."""
        if record is None or record.count() == 0 or not self._in_range(offset):
            return False
        self.rows.insert(offset, self._record_to_row(record))
        return True

    def update_row(self, offset: int, record: Record) -> bool:
        """Overwrite the row's values for every cell in the record."""
        if record is None or record.count() == 0 or not self._in_range(offset):
            return False
        self.rows[offset].update(self._record_to_row(record))
        return True

    def _find_by_primary(self, record: Record) -> Optional[int]:
        primary = record.primary_key_item()
        if primary is None:
            return None
        for offset, row in enumerate(self.rows):
            values = row.get(primary.name, [])
            if (values[0] if values else "") == primary.get_value():
                return offset
        return None

    def update(self, record: Record) -> bool:
        """
        Update the row whose primary key matches the record.

        Returns:
            False when the record has no primary key or no row matches
        """
        offset = self._find_by_primary(record)
        if offset is None:
            return False
        return self.update_row(offset, record)

    def delete_row(self, offset: int) -> bool:
        if not self._in_range(offset):
            return False
        del self.rows[offset]
        return True

    def delete(self, record: Record) -> bool:
        """Delete the row whose primary key matches the record."""
        offset = self._find_by_primary(record)
        if offset is None:
            return False
        return self.delete_row(offset)

    def set_value_by_row_name(self, offset: int, name: str, value: Any) -> None:
        """
        Assign a value to one cell of an existing row.

        Raises:
            NotFoundError: If the row or the column does not exist
        """
        if not self._in_range(offset):
            raise NotFoundError(f"Row offset {offset} is out of range.")
        self.rows[offset][name] = self._cell_values(name, value)

    def set_value_by_row_col(self, offset: int, col: int, value: Any) -> None:
        column = self.columns.get_item_by_offset(col)
        self.set_value_by_row_name(offset, column.name, value)

    def empty_rows(self) -> None:
        self.rows = []
        self._new_row = None

    def empty_all(self) -> None:
        """Drop rows, columns and features."""
        self.empty_rows()
        self.columns = Record(self.name)
        self.features.clear()

    # ========================================
    # Row access
    # ========================================

    def get_rows(self) -> List[Row]:
        return [_copy_row(row) for row in self.rows]

    def _row_to_record(self, offset: int) -> Record:
        record = self.columns.copy()
        record.name = f"{self.name} [Row {offset + 1}]"
        for name, values in self.rows[offset].items():
            cell = record.get_item_by_name_optional(name)
            if cell is not None:
                cell.set_values(values)
        return record

    def get_row_as_record(self, offset: int) -> Record:
        """
        Row as a standalone Record named "<grid> [Row n]".

        Raises:
            NotFoundError: If the offset is out of range
        """
        if not self._in_range(offset):
            raise NotFoundError(f"Row offset {offset} is out of range.")
        return self._row_to_record(offset)

    def get_row_as_record_optional(self, offset: int) -> Optional[Record]:
        if not self._in_range(offset):
            return None
        return self._row_to_record(offset)

    def get_item_by_row_name(self, offset: int, name: str) -> Optional[ValueCell]:
        record = self.get_row_as_record_optional(offset)
        return record.get_item_by_name_optional(name) if record else None

    def get_item_by_row_col(self, offset: int, col: int) -> Optional[ValueCell]:
        if not 0 <= col < self.col_count():
            return None
        record = self.get_row_as_record_optional(offset)
        return record.get_item_by_offset(col) if record else None

    def rows_as_records(self) -> List[Record]:
        return [self._row_to_record(offset) for offset in range(len(self.rows))]

    def __iter__(self) -> Iterator[Record]:
        return iter(self.rows_as_records())

    def __len__(self) -> int:
        return len(self.rows)

    def is_grid_row_values_equal(self, other: 'Grid') -> ComparisonResult:
        """Compare rows pairwise by offset."""
        result = ComparisonResult()
        if self.row_count() != other.row_count():
            result.changed.append(self.name)
            result.messages.append(
                f"Row count differs: {self.row_count()} != {other.row_count()}")
            return result
        for offset in range(self.row_count()):
            comparison = self.get_row_as_record(offset).is_item_values_equal(
                other.get_row_as_record(offset))
            if not comparison.is_equal:
                result.changed.append(f"Row {offset}")
                result.messages.append(f"Row {offset}: {VALIDATION_MESSAGE_ITEM_CHANGED}")
        return result

    # ========================================
    # Sorting and statistics
    # ========================================

    def _sort_key(self, column: ValueCell):
        name = column.name

        def parse(record: Record):
            cell = record.get_item_by_name(name)
            if not cell.get_value():
                return (0, 0)
            if column.type in (DataType.INTEGER, DataType.LONG):
                return (1, cell.get_value_as_int())
            if is_number(column.type):
                return (1, cell.get_value_as_float())
            if is_date_or_time(column.type):
                return (1, cell.get_value_as_datetime())
            return (1, cell.get_value())

        return parse

    def sort_by_column_name(self, name: str, order: SortOrder = SortOrder.ASCENDING) -> 'Grid':
        """
        Return a new grid with rows sorted by one column.

        The comparison follows the column type (numeric, date or text).
        Empty values sort first in ascending order. The sort is stable,
        so sorting an already sorted grid keeps its row order.
        """
        sorted_grid = Grid(self.name, self.columns)
        sorted_grid.features = dict(self.features)
        column = self.columns.get_item_by_name_optional(name)
        if column is None:
            return sorted_grid

        records = self.rows_as_records()
        records.sort(key=self._sort_key(column), reverse=order == SortOrder.DESCENDING)
        for record in records:
            sorted_grid.add_row(record)
        return sorted_grid

    def get_descriptive_statistics(self, name: str) -> ColumnStatistics:
        """
        Mean, sample standard deviation, min, max, sum and median of a column.

        Non-numeric columns and empty cells contribute no observations.

        Raises:
            NotFoundError: If the column does not exist
        """
        column = self.columns.get_item_by_name(name)
        if not is_number(column.type):
            return ColumnStatistics.empty(name)

        observations = []
        for record in self.rows_as_records():
            cell = record.get_item_by_name(name)
            if cell.get_value():
                observations.append(cell.get_value_as_float())
        if not observations:
            return ColumnStatistics.empty(name)

        values = np.asarray(observations, dtype=float)
        std_dev = float(np.std(values, ddof=1)) if values.size > 1 else 0.0
        return ColumnStatistics(
            name=name,
            count=int(values.size),
            mean=float(np.mean(values)),
            std_dev=std_dev,
            minimum=float(np.min(values)),
            maximum=float(np.max(values)),
            total=float(np.sum(values)),
            median=float(np.median(values)),
        )

    # ========================================
    # Encoding
    # ========================================

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'features': dict(self.features),
            'columns': self.columns.to_dict(),
            'rows': self.get_rows(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Grid':
        grid = cls(data.get('name', ""), Record.from_dict(data['columns']))
        grid.features = dict(data.get('features', {}))
        for row in data.get('rows', []):
            grid.rows.append({name: list(values) for name, values in row.items()
                              if name in grid.columns})
        return grid

    def __repr__(self) -> str:
        return f"Grid(name={self.name}, cols={self.col_count()}, rows={self.row_count()})"


def _copy_row(row: Row) -> Row:
    return {name: list(values) for name, values in row.items()}
