"""
ValueRange: constraint attached to a ValueCell.

A range is either an enumerated list of text values or a min/max pair
for a numeric or date type. Bounds are exclusive unless the range is
declared inclusive.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from recordkit.core.data import (
    DataType, FORMAT_DATETIME_DEFAULT, is_date_or_time, is_integral, is_number,
)

Bound = Union[int, float, datetime]


class ValueRange:
    """
    Enumerated or min/max constraint over cell values.

    Example:
        colors = ValueRange.of_text("red", "green", "blue")
        colors.is_valid("green")             # True

        ages = ValueRange.of_numbers(0, 130)
        ages.is_valid(130)                   # False, bounds are exclusive
    """

    def __init__(
        self,
        data_type: DataType,
        items: Optional[List[str]] = None,
        minimum: Optional[Bound] = None,
        maximum: Optional[Bound] = None,
        inclusive: bool = False
    ):
        self.type = data_type
        self.items: List[str] = list(items or [])
        self.minimum = minimum
        self.maximum = maximum
        self.inclusive = inclusive

    @classmethod
    def of_text(cls, *items: str) -> 'ValueRange':
        return cls(DataType.TEXT, items=list(items))

    @classmethod
    def of_numbers(cls, minimum, maximum, inclusive: bool = False) -> 'ValueRange':
        """
        Numeric range; the type follows the bounds (Long for ints, Double for floats).

        Raises:
            ValueError: If minimum is greater than maximum
        """
        if minimum > maximum:
            raise ValueError(f"Range minimum {minimum} exceeds maximum {maximum}")
        if isinstance(minimum, int) and isinstance(maximum, int):
            data_type = DataType.LONG
        else:
            data_type = DataType.DOUBLE
            minimum, maximum = float(minimum), float(maximum)
        return cls(data_type, minimum=minimum, maximum=maximum, inclusive=inclusive)

    @classmethod
    def of_dates(cls, minimum: datetime, maximum: datetime, inclusive: bool = False) -> 'ValueRange':
        if minimum > maximum:
            raise ValueError(f"Range minimum {minimum} exceeds maximum {maximum}")
        return cls(DataType.DATETIME, minimum=_as_datetime(minimum),
                   maximum=_as_datetime(maximum), inclusive=inclusive)

    def add(self, item: str) -> None:
        """Append an enumerated text value."""
        if self.type == DataType.TEXT:
            self.items.append(item)

    def copy(self) -> 'ValueRange':
        return ValueRange(self.type, self.items, self.minimum, self.maximum, self.inclusive)

    # ========================================
    # Validation
    # ========================================

    def is_valid(self, value: Any) -> bool:
        """
        Check a typed value against the range.

        Text ranges test membership; numeric and date ranges compare
        against the bounds.
        """
        if self.type == DataType.TEXT:
            return str(value) in self.items
        if value is None:
            return False
        if is_date_or_time(self.type):
            value = _as_datetime(value)
        if self.inclusive:
            return self.minimum <= value <= self.maximum
        return self.minimum < value < self.maximum

    def is_valid_string(self, text: str, data_format: Optional[str] = None) -> bool:
        """Parse a stored string according to the range type and validate it."""
        try:
            if self.type == DataType.TEXT:
                return text in self.items
            if is_integral(self.type):
                return self.is_valid(int(float(text)) if "e" in text.lower() else int(text))
            if is_number(self.type):
                return self.is_valid(float(text))
            if is_date_or_time(self.type):
                return self.is_valid(datetime.strptime(text, data_format or FORMAT_DATETIME_DEFAULT))
        except (TypeError, ValueError, OverflowError):
            return False
        return False

    def is_equal(self, other: Optional['ValueRange']) -> bool:
        if other is None:
            return False
        return (self.type == other.type and self.items == other.items
                and self.minimum == other.minimum and self.maximum == other.maximum
                and self.inclusive == other.inclusive)

    # ========================================
    # Presentation
    # ========================================

    def min_string(self) -> str:
        if self.type == DataType.TEXT:
            return self.items[0] if self.items else ""
        return _bound_string(self.minimum)

    def max_string(self) -> str:
        if self.type == DataType.TEXT:
            return self.items[-1] if self.items else ""
        return _bound_string(self.maximum)

    def min_max_string(self) -> str:
        if self.type == DataType.TEXT:
            return ", ".join(self.items)
        if self.type == DataType.DOUBLE:
            return f"Range: {self.minimum:.4f} - {self.maximum:.4f}"
        return f"Range: {self.min_string()} - {self.max_string()}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'items': list(self.items),
            'min': self.min_string() if self.type != DataType.TEXT else None,
            'max': self.max_string() if self.type != DataType.TEXT else None,
            'inclusive': self.inclusive,
        }

    def __repr__(self) -> str:
        return f"ValueRange({self.type.value} - {self.min_max_string()})"


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise TypeError(f"Expected a date or datetime, got {type(value).__name__}")


def _bound_string(bound) -> str:
    if bound is None:
        return ""
    if isinstance(bound, datetime):
        return bound.strftime(FORMAT_DATETIME_DEFAULT)
    return str(bound)
