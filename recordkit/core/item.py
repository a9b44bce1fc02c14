"""
ValueCell: the smallest unit of the record model.

A ValueCell is a named, typed and possibly multi-valued datum. Values are
always held as strings; the typed setters format them and the typed
getters parse them back. Cells carry presentation metadata (title,
formats, sizes, sort order), an optional range constraint, persistent
features and transient properties.
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from recordkit.core.data import (
    DataType, SortOrder, FEATURE_IS_CURRENCY, FEATURE_IS_HIDDEN,
    FEATURE_IS_PRIMARY, FEATURE_IS_REQUIRED, FEATURE_IS_SECRET,
    FEATURE_IS_STORED, FEATURE_IS_SUGGEST, FEATURE_IS_UPDATED,
    FEATURE_IS_VISIBLE, MULTI_VALUE_DELIMITER, VALUE_DATETIME_TODAY,
    VALIDATION_MESSAGE_IS_REQUIRED, VALIDATION_MESSAGE_OUT_OF_RANGE,
    boolean_to_string, collapse_values, default_format, detect_datetime,
    detect_datetime_format, expand_values, is_parsable_number, name_to_title, string_to_boolean,
    type_of_object,
)
from recordkit.core.features import FeatureMixin
from recordkit.core.hashing import digest_of
from recordkit.core.range import ValueRange
from recordkit.exceptions import ValueConversionError


class ValueCell(FeatureMixin):
    """
    Named, typed, multi-value capable datum.

    The type is inferred as Text on the first value assignment when it is
    still Undefined. Any successful set/add enables the "isUpdated" flag;
    clear_values() disables it.

    Equality and hashing only consider the type, the name and the
    collapsed values. Features, properties and presentation metadata are
    ignored, so a cell must not be mutated while it is a graph vertex or
    a dictionary key.

    Example:
        cell = ValueCell("age", DataType.INTEGER)
        cell.set_value(42)
        cell.get_value_as_int()      # 42
        cell.add_value(43)
        cell.is_multi_value()        # True
    """

    def __init__(
        self,
        name: str,
        data_type: DataType = DataType.UNDEFINED,
        title: Optional[str] = None
    ):
        """
        Initialize a ValueCell.

        Args:
            name: Item name (must not be empty)
            data_type: Value type, Undefined until the first value if omitted
            title: Display title (empty when not provided)

        Raises:
            ValueError: If name is empty
        """
        if not name:
            raise ValueError("ValueCell name must not be empty")
        self._init_features()
        self.name = name
        self.title = title or ""
        self.values: List[str] = []
        self.default_value: Optional[str] = None
        self.range: Optional[ValueRange] = None
        self.data_format: Optional[str] = None
        self.ui_format: Optional[str] = None
        self.display_size = 0
        self.stored_size = 0
        self.sort_order = SortOrder.UNDEFINED
        self._type = DataType.UNDEFINED
        self.type = data_type
        self.enable_feature(FEATURE_IS_VISIBLE)

    @classmethod
    def from_object(cls, name: str, value: Any) -> 'ValueCell':
        """
        Build a cell whose type is inferred from a Python value.

        Text containing the multi-value delimiter is expanded into
        several values.
        """
        cell = cls(name, type_of_object(value), name_to_title(name))
        if cell.type == DataType.TEXT and MULTI_VALUE_DELIMITER in str(value):
            cell.expand_and_set_values(str(value))
        else:
            cell.set_value(value)
        return cell

    def copy(self) -> 'ValueCell':
        """Clone the cell; values, range, features and properties are copied."""
        clone = ValueCell(self.name, DataType.UNDEFINED, self.title)
        clone.data_format = self.data_format
        clone.ui_format = self.ui_format
        clone._type = self._type
        clone.sort_order = self.sort_order
        clone.stored_size = self.stored_size
        clone.display_size = self.display_size
        clone.default_value = self.default_value
        clone.range = self.range.copy() if self.range else None
        clone.values = list(self.values)
        clone.features = dict(self.features)
        clone.properties = dict(self.properties)
        return clone

    # ========================================
    # Type and metadata
    # ========================================

    @property
    def type(self) -> DataType:
        return self._type

    @type.setter
    def type(self, data_type: DataType) -> None:
        self._type = data_type
        if not self.data_format:
            self.data_format = default_format(data_type)

    def is_sorted(self) -> bool:
        return self.sort_order != SortOrder.UNDEFINED

    def set_range(self, value_range: ValueRange) -> None:
        self.range = value_range

    def clear_range(self) -> None:
        self.range = None

    def is_range_assigned(self) -> bool:
        return self.range is not None

    # ========================================
    # Values
    # ========================================

    def _to_string(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        if self._type == DataType.UNDEFINED:
            self.type = type_of_object(value)
        if isinstance(value, bool):
            return boolean_to_string(value)
        if isinstance(value, (datetime, date)):
            return value.strftime(self.data_format or default_format(type_of_object(value)))
        return str(value)

    def _mark_updated(self) -> None:
        if self._type == DataType.UNDEFINED:
            self.type = DataType.TEXT
        self.enable_feature(FEATURE_IS_UPDATED)

    def set_value(self, value: Any) -> None:
        """
        Replace all values with a single value.

        None and empty strings are ignored. Non-string values are
        formatted according to their type.
        """
        if value is None:
            return
        text = self._to_string(value)
        if text:
            self.values = [text]
            self._mark_updated()

    def add_value(self, value: Any) -> None:
        """Append a value, keeping the existing ones."""
        if value is None:
            return
        text = self._to_string(value)
        if text:
            self.values.append(text)
            self._mark_updated()

    def add_value_unique(self, value: Any) -> None:
        """Append a value only when it is not already present."""
        if value is None:
            return
        text = self._to_string(value)
        if text and text not in self.values:
            self.values.append(text)
            self._mark_updated()

    def set_values(self, values: Iterable[Any]) -> None:
        """Replace all values; empty entries are dropped."""
        texts = [self._to_string(v) for v in values if v is not None]
        texts = [t for t in texts if t]
        self.values = texts
        if texts:
            self._mark_updated()

    def expand_and_set_values(self, text: str, delimiter: str = MULTI_VALUE_DELIMITER) -> None:
        self.set_values(expand_values(text, delimiter))

    def clear_values(self) -> None:
        self.values = []
        self.disable_feature(FEATURE_IS_UPDATED)

    def get_value(self) -> str:
        """First value, or an empty string when unassigned."""
        return self.values[0] if self.values else ""

    def get_values_collapsed(self, delimiter: str = MULTI_VALUE_DELIMITER) -> str:
        return collapse_values(self.values, delimiter)

    def is_value_assigned(self) -> bool:
        return len(self.values) > 0

    def is_value_empty(self) -> bool:
        return not self.get_value()

    def is_multi_value(self) -> bool:
        return len(self.values) > 1

    def value_count(self) -> int:
        return len(self.values)

    def set_default_value(self, value: Any) -> None:
        if isinstance(value, bool):
            value = boolean_to_string(value)
        self.default_value = None if value is None else str(value)

    def assign_value_from_default(self) -> None:
        """Copy the default value (if any) into the values."""
        if not self.default_value:
            return
        if self.default_value == VALUE_DATETIME_TODAY:
            self.set_value(datetime.now())
        else:
            self.set_value(self.default_value)

    # ========================================
    # Typed getters
    # ========================================

    def _require_value(self, text: str, type_name: str) -> str:
        if not text:
            raise ValueConversionError(f"Item '{self.name}' has no value to read as {type_name}")
        return text

    def _parse_int(self, text: str) -> int:
        text = self._require_value(text, "integer")
        try:
            if "e" in text.lower():
                return int(float(text))
            return int(text)
        except (ValueError, OverflowError) as exc:
            raise ValueConversionError(
                f"Item '{self.name}' value '{text}' is not an integer"
            ) from exc

    def _parse_float(self, text: str) -> float:
        text = self._require_value(text, "number")
        try:
            return float(text)
        except ValueError as exc:
            raise ValueConversionError(
                f"Item '{self.name}' value '{text}' is not a number"
            ) from exc

    def _parse_datetime(self, text: str, data_format: Optional[str]) -> datetime:
        text = self._require_value(text, "date")
        layout = data_format or self.data_format or default_format(DataType.DATETIME)
        try:
            return datetime.strptime(text, layout)
        except ValueError as exc:
            raise ValueConversionError(
                f"Item '{self.name}' value '{text}' does not match '{layout}'"
            ) from exc

    def get_value_as_int(self) -> int:
        """
        Read the first value as an integer.

        Values written with an exponent (e.g. "1.5E3") are parsed as a
        float first and then truncated.

        Raises:
            ValueConversionError: If no value is assigned or it is not numeric
        """
        return self._parse_int(self.get_value())

    get_value_as_long = get_value_as_int

    def get_value_as_float(self) -> float:
        return self._parse_float(self.get_value())

    get_value_as_double = get_value_as_float

    def get_value_as_boolean(self) -> bool:
        return string_to_boolean(self.get_value())

    def is_value_true(self) -> bool:
        return string_to_boolean(self.get_value())

    def get_value_as_datetime(self, data_format: Optional[str] = None) -> datetime:
        return self._parse_datetime(self.get_value(), data_format)

    def get_value_as_date(self, data_format: Optional[str] = None) -> date:
        return self.get_value_as_datetime(data_format).date()

    def get_values_as_int(self) -> List[int]:
        return [self._parse_int(v) for v in self.values]

    def get_values_as_float(self) -> List[float]:
        return [self._parse_float(v) for v in self.values]

    def get_values_as_boolean(self) -> List[bool]:
        return [string_to_boolean(v) for v in self.values]

    def get_values_as_datetime(self, data_format: Optional[str] = None) -> List[datetime]:
        return [self._parse_datetime(v, data_format) for v in self.values]

    def get_value_as_object(self) -> Any:
        """First value converted according to the cell's type."""
        if self._type in (DataType.INTEGER, DataType.LONG):
            return self.get_value_as_int()
        if self._type in (DataType.FLOAT, DataType.DOUBLE):
            return self.get_value_as_float()
        if self._type == DataType.BOOLEAN:
            return self.get_value_as_boolean()
        if self._type == DataType.DATETIME:
            return self.get_value_as_datetime()
        if self._type == DataType.DATE:
            return self.get_value_as_date()
        if self.is_multi_value():
            return self.get_values_collapsed()
        return self.get_value()

    # ========================================
    # Validation and comparison
    # ========================================

    def validate(self) -> Optional[str]:
        """
        Check the required flag and the range constraint.

        Hidden cells are never validated.

        Returns:
            Violation message, or None when the cell is valid
        """
        if self.is_feature_true(FEATURE_IS_HIDDEN):
            return None
        if self.is_feature_true(FEATURE_IS_REQUIRED) and not self.get_value():
            return VALIDATION_MESSAGE_IS_REQUIRED
        if self.range is not None and not self.range.is_valid_string(self.get_value(), self.data_format):
            return VALIDATION_MESSAGE_OUT_OF_RANGE
        return None

    def is_valid(self) -> bool:
        return self.validate() is None

    def is_value_equal(self, other: Optional['ValueCell']) -> bool:
        if other is None:
            return False
        return self.get_values_collapsed() == other.get_values_collapsed()

    def is_equal(self, other: Optional['ValueCell']) -> bool:
        if other is None:
            return False
        return (self._type == other._type and self.name == other.name
                and self.is_value_equal(other))

    def hash_id(self) -> str:
        """Content digest over name, type, title and the escaped value list."""
        return digest_of(self.name, self._type.value, self.title, self.get_values_collapsed())

    def __eq__(self, other) -> bool:
        if not isinstance(other, ValueCell):
            return NotImplemented
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash((self._type, self.name, self.get_values_collapsed()))

    # ========================================
    # Encoding
    # ========================================

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for encoders; properties are excluded."""
        return {
            'name': self.name,
            'type': self._type.value,
            'title': self.title,
            'features': dict(self.features),
            'values': list(self.values),
            'default_value': self.default_value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ValueCell':
        cell = cls(data['name'], DataType(data.get('type', DataType.UNDEFINED.value)),
                   data.get('title'))
        cell.values = [v for v in data.get('values', []) if v]
        cell.default_value = data.get('default_value')
        cell.features = dict(data.get('features', {}))
        return cell

    def __repr__(self) -> str:
        return f"ValueCell(name={self.name}, type={self._type.value}, values={self.values})"


class ValueCellBuilder:
    """
    Fluent construction of ValueCells.

    Example:
        cell = (ValueCellBuilder()
                .name("customer_id").type(DataType.INTEGER)
                .is_primary(True).value(1001)
                .build())
    """

    def __init__(self):
        self._name: Optional[str] = None
        self._title: Optional[str] = None
        self._type = DataType.UNDEFINED
        self._values: List[Any] = []
        self._default = None
        self._range: Optional[ValueRange] = None
        self._data_format: Optional[str] = None
        self._ui_format: Optional[str] = None
        self._display_size = 0
        self._stored_size = 0
        self._sort_order = SortOrder.UNDEFINED
        self._flags: Dict[str, bool] = {FEATURE_IS_VISIBLE: True}

    def name(self, name: str) -> 'ValueCellBuilder':
        self._name = name
        return self

    def title(self, title: str) -> 'ValueCellBuilder':
        self._title = title
        return self

    def type(self, data_type: DataType) -> 'ValueCellBuilder':
        self._type = data_type
        return self

    def data_format(self, data_format: str) -> 'ValueCellBuilder':
        self._data_format = data_format
        return self

    def ui_format(self, ui_format: str) -> 'ValueCellBuilder':
        self._ui_format = ui_format
        return self

    def display_size(self, size: int) -> 'ValueCellBuilder':
        self._display_size = size
        return self

    def stored_size(self, size: int) -> 'ValueCellBuilder':
        self._stored_size = size
        return self

    def sort_order(self, order: SortOrder) -> 'ValueCellBuilder':
        self._sort_order = order
        return self

    def range(self, value_range: ValueRange) -> 'ValueCellBuilder':
        self._range = value_range
        return self

    def default_value(self, value: Any) -> 'ValueCellBuilder':
        self._default = value
        return self

    def value(self, value: Any) -> 'ValueCellBuilder':
        """Set a single value; the type follows the value when still Undefined."""
        if value is not None:
            if self._type == DataType.UNDEFINED and not isinstance(value, str):
                self._type = type_of_object(value)
            self._values = [value]
        return self

    def values(self, *values: Any) -> 'ValueCellBuilder':
        present = [v for v in values if v is not None and v != ""]
        if present:
            if self._type == DataType.UNDEFINED and not isinstance(present[0], str):
                self._type = type_of_object(present[0])
            self._values = present
        return self

    def analyze(self, *values: str) -> 'ValueCellBuilder':
        """
        Add string values and derive the type from the first one.

        Plain numbers become Integer (no decimal point) or Double,
        recognizable dates become DateTime, anything else is Text.
        """
        first = True
        for text in values:
            if not text:
                continue
            self._values.append(text)
            if first:
                first = False
                self._type = _analyze_type(text)
                if self._type == DataType.DATETIME and not self._data_format:
                    self._data_format = detect_datetime_format(text)
        return self

    def _flag(self, feature: str, enabled: bool) -> 'ValueCellBuilder':
        self._flags[feature] = enabled
        return self

    def is_stored(self, enabled: bool = True) -> 'ValueCellBuilder':
        return self._flag(FEATURE_IS_STORED, enabled)

    def is_visible(self, enabled: bool = True) -> 'ValueCellBuilder':
        return self._flag(FEATURE_IS_VISIBLE, enabled)

    def is_hidden(self, enabled: bool = True) -> 'ValueCellBuilder':
        return self._flag(FEATURE_IS_HIDDEN, enabled)

    def is_required(self, enabled: bool = True) -> 'ValueCellBuilder':
        return self._flag(FEATURE_IS_REQUIRED, enabled)

    def is_primary(self, enabled: bool = True) -> 'ValueCellBuilder':
        return self._flag(FEATURE_IS_PRIMARY, enabled)

    def is_suggest(self, enabled: bool = True) -> 'ValueCellBuilder':
        return self._flag(FEATURE_IS_SUGGEST, enabled)

    def is_currency(self, enabled: bool = True) -> 'ValueCellBuilder':
        return self._flag(FEATURE_IS_CURRENCY, enabled)

    def is_secret(self, enabled: bool = True) -> 'ValueCellBuilder':
        return self._flag(FEATURE_IS_SECRET, enabled)

    def build(self) -> ValueCell:
        """
        Create the ValueCell.

        Raises:
            ValueError: If no name was given
        """
        data_type = self._type
        if data_type == DataType.UNDEFINED and self._values:
            data_type = DataType.TEXT
        cell = ValueCell(self._name, DataType.UNDEFINED, self._title)
        if self._data_format:
            cell.data_format = self._data_format
        cell.type = data_type
        cell.ui_format = self._ui_format
        cell.display_size = self._display_size
        cell.stored_size = self._stored_size
        cell.sort_order = self._sort_order
        cell.range = self._range
        cell.set_default_value(self._default)
        cell.features.clear()
        for feature, enabled in self._flags.items():
            if enabled:
                cell.enable_feature(feature)
        if self._values:
            cell.set_values(self._values)
        return cell


def _analyze_type(text: str) -> DataType:
    if is_parsable_number(text):
        return DataType.DOUBLE if "." in text else DataType.INTEGER
    if detect_datetime(text) is not None:
        return DataType.DATETIME
    return DataType.TEXT
