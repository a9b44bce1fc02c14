"""
Column profiling.

ItemAnalyzer scans the string values of one column, infers the narrowest
type that fits all of them and keeps counts and numeric statistics.
GridAnalyzer runs one ItemAnalyzer per column of a Grid and summarizes
the result as another Grid, one row per column.
"""

from collections import Counter
from typing import Dict, List, Optional

import numpy as np

from recordkit.core.data import (
    DataType, detect_datetime, is_date_or_time, is_number, is_parsable_number,
    FORMAT_DATETIME_DEFAULT,
)
from recordkit.core.grid import Grid
from recordkit.core.item import ValueCellBuilder
from recordkit.core.record import Record

_BOOLEAN_WORDS = frozenset(["true", "false", "yes", "no"])


class ItemAnalyzer:
    """
    Profiles the values of a single column.

    Example:
        analyzer = ItemAnalyzer("age")
        for value in ["31", "47", "", "31"]:
            analyzer.scan(value)
        analyzer.type            # DataType.INTEGER
        analyzer.null_count      # 1
    """

    def __init__(self, name: str, data_type: DataType = DataType.UNDEFINED):
        self.declared_type = data_type
        self.reset(name)

    def reset(self, name: str) -> None:
        self.name = name
        self.null_count = 0
        self.total_values = 0
        self._is_integer = True
        self._is_float = True
        self._is_date = True
        self._is_boolean = True
        self._numbers: List[float] = []
        self.value_counts: Counter = Counter()

    def _is_number_type(self) -> bool:
        return self._is_integer or self._is_float

    def _scan_type(self, value: str) -> None:
        if self._is_number_type():
            if is_parsable_number(value):
                if "." in value:
                    self._is_integer = False
            else:
                self._is_integer = False
                self._is_float = False
        if self._is_date and detect_datetime(value) is None:
            self._is_date = False
        if self._is_boolean and value.lower() not in _BOOLEAN_WORDS:
            self._is_boolean = False

    def scan(self, value: Optional[str]) -> None:
        """Account for one value; empty values count as nulls."""
        self.total_values += 1
        if not value:
            self.null_count += 1
            return
        self._scan_type(value)
        if is_parsable_number(value):
            self._numbers.append(float(value))
        self.value_counts[value] += 1

    @property
    def type(self) -> DataType:
        """Declared type, or the narrowest type seen so far."""
        if self.declared_type != DataType.UNDEFINED:
            return self.declared_type
        if self._is_boolean:
            return DataType.BOOLEAN
        if self._is_integer:
            return DataType.INTEGER
        if self._is_float:
            return DataType.FLOAT
        if self._is_date:
            return DataType.DATETIME
        return DataType.TEXT

    @property
    def unique_count(self) -> int:
        return len(self.value_counts)

    def top_values(self, sample_count: int) -> List[tuple]:
        """(value, count, percent) for the most frequent values."""
        samples = []
        for value, count in self.value_counts.most_common(sample_count):
            percent = count / self.total_values * 100.0 if self.total_values else 0.0
            samples.append((value.strip(), count, round(percent, 2)))
        return samples

    def _min_max(self, data_type: DataType) -> tuple:
        values = list(self.value_counts)
        if not values:
            return "", ""
        if data_type == DataType.BOOLEAN:
            return "false", "true"
        if is_number(data_type):
            # only values that parsed as numbers during the scan
            if not self._numbers:
                return "", ""
            numbers = np.asarray(self._numbers)
            return f"{numbers.min():.2f}", f"{numbers.max():.2f}"
        if is_date_or_time(data_type):
            moments = [detect_datetime(v) for v in values]
            moments = [m for m in moments if m is not None]
            if not moments:
                return "", ""
            return (min(moments).strftime(FORMAT_DATETIME_DEFAULT),
                    max(moments).strftime(FORMAT_DATETIME_DEFAULT))
        lengths = np.asarray([len(v) for v in values])
        return f"{lengths.min():.2f}", f"{lengths.max():.2f}"

    def details(self, sample_count: int = 0) -> Record:
        """
        Summary of the scanned values as a Record.

        Items: name, type, total_count, unique_count, null_count, minimum,
        maximum, mean and standard_deviation (numeric types only), then
        value_NN/count_NN/percent_NN for the top sample_count values.
        """
        data_type = self.type
        record = Record(self.name)
        record.add(ValueCellBuilder().name("name").title("Name").value(self.name).build())
        record.add(ValueCellBuilder().name("type").title("Type").value(data_type.value).build())
        record.add(ValueCellBuilder().name("total_count").title("Total Count").value(self.total_values).build())
        record.add(ValueCellBuilder().name("unique_count").title("Unique Count").value(self.unique_count).build())
        record.add(ValueCellBuilder().name("null_count").title("Null Count").value(self.null_count).build())

        minimum, maximum = self._min_max(data_type)
        record.add(ValueCellBuilder().name("minimum").title("Minimum").value(minimum).build())
        record.add(ValueCellBuilder().name("maximum").title("Maximum").value(maximum).build())
        if is_number(data_type) and self._numbers:
            numbers = np.asarray(self._numbers)
            std_dev = float(np.std(numbers, ddof=1)) if numbers.size > 1 else 0.0
            record.add(ValueCellBuilder().name("mean").title("Mean")
                       .value(f"{float(np.mean(numbers)):.2f}").build())
            record.add(ValueCellBuilder().name("standard_deviation").title("Deviation")
                       .value(f"{std_dev:.2f}").build())

        for offset, (value, count, percent) in enumerate(self.top_values(sample_count), start=1):
            record.add(ValueCellBuilder().name(f"value_{offset:02d}")
                       .title(f"Value {offset:02d}").value(value).build())
            record.add(ValueCellBuilder().name(f"count_{offset:02d}").type(DataType.INTEGER)
                       .title(f"Count {offset:02d}").value(count).build())
            record.add(ValueCellBuilder().name(f"percent_{offset:02d}").type(DataType.DOUBLE)
                       .title(f"Percent {offset:02d}").value(percent).build())
        return record


class GridAnalyzer:
    """
    Profiles every column of a Grid.

    Example:
        summary = GridAnalyzer(grid).analyze(sample_count=3)
        summary.get_row_as_record(0).get_value_by_name("type")
    """

    def __init__(self, grid: Grid):
        self.grid = grid
        self.analyzers: Dict[str, ItemAnalyzer] = {}

    def scan(self) -> Dict[str, ItemAnalyzer]:
        self.analyzers = {name: ItemAnalyzer(name) for name in self.grid.column_names()}
        for row in self.grid.rows:
            for name, analyzer in self.analyzers.items():
                values = row.get(name, [])
                analyzer.scan(values[0] if values else "")
        return self.analyzers

    def analyze(self, sample_count: int = 0) -> Grid:
        """Scan the grid and return one summary row per column."""
        self.scan()
        summary = Grid(f"{self.grid.name} Analysis")
        all_details = [analyzer.details(sample_count) for analyzer in self.analyzers.values()]
        for details in all_details:
            for cell in details:
                if cell.name not in summary.columns:
                    summary.add_col(ValueCellBuilder().name(cell.name).title(cell.title)
                                    .type(cell.type).build())
        for details in all_details:
            summary.add_row(details)
        return summary
