"""
Data: shared vocabulary of the record model.

Holds the enumerations (value types, sort order, graph structures and
graph data models), the well-known feature names, default formats and the
small string helpers used by items, records, grids and graphs.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional
import re


class DataType(Enum):
    """Type of the values stored in a ValueCell."""
    TEXT = "Text"
    INTEGER = "Integer"
    LONG = "Long"
    FLOAT = "Float"
    DOUBLE = "Double"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    DATE = "Date"
    UNDEFINED = "Undefined"

    def __str__(self) -> str:
        return self.value


class SortOrder(Enum):
    UNDEFINED = "UNDEFINED"
    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"


class GraphStructure(Enum):
    """Closed set of graph topologies a RecordGraph can be built on."""
    SIMPLE_GRAPH = "SimpleGraph"
    SIMPLE_WEIGHTED_GRAPH = "SimpleWeightedGraph"
    SIMPLE_DIRECTED_GRAPH = "SimpleDirectedGraph"
    SIMPLE_DIRECTED_WEIGHTED_GRAPH = "SimpleDirectedWeightedGraph"
    MULTI_GRAPH = "MultiGraph"
    DIRECTED_PSEUDOGRAPH = "DirectedPseudograph"
    DIRECTED_WEIGHTED_PSEUDOGRAPH = "DirectedWeightedPseudograph"
    UNDEFINED = "Undefined"

    def __str__(self) -> str:
        return self.value


class GraphDataModel(Enum):
    """Payload kinds of a graph, written as <vertex><edge>."""
    ITEM_ITEM = "ItemItem"
    DOC_ITEM = "DocItem"
    DOC_DOC = "DocDoc"
    UNDEFINED = "Undefined"

    def __str__(self) -> str:
        return self.value


# ========================================
# Formats
# ========================================

FORMAT_DATE_DEFAULT = "%b-%d-%Y"
FORMAT_TIME_DEFAULT = "%H:%M:%S"
FORMAT_DATETIME_DEFAULT = "%b-%d-%Y %H:%M:%S"
FORMAT_SQLISODATE_DEFAULT = "%Y-%m-%d"
FORMAT_SQLISODATETIME_DEFAULT = "%Y-%m-%d %H:%M:%S"
FORMAT_ISO8601DATETIME_DEFAULT = "%Y-%m-%dT%H:%M:%SZ"
FORMAT_INTEGER_PLAIN = "#"
FORMAT_DOUBLE_POINT = "###.####"

VALUE_DATETIME_TODAY = "DateTimeToday"

# Date/time layouts tried when a value has to be recognized without a format
DATETIME_PARSE_FORMATS = (
    FORMAT_DATETIME_DEFAULT,
    FORMAT_DATE_DEFAULT,
    FORMAT_SQLISODATETIME_DEFAULT,
    FORMAT_SQLISODATE_DEFAULT,
    FORMAT_ISO8601DATETIME_DEFAULT,
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%y",
)

# ========================================
# Record actions
# ========================================

ACTION_ADD_DOCUMENT = "Add"
ACTION_UPD_DOCUMENT = "Update"
ACTION_DEL_DOCUMENT = "Delete"

# ========================================
# Features
# ========================================

FEATURE_TRUE = "true"
FEATURE_FALSE = "false"

FEATURE_IS_SECRET = "isSecret"
FEATURE_IS_STORED = "isStored"
FEATURE_IS_HIDDEN = "isHidden"
FEATURE_IS_SEARCH = "isSearch"
FEATURE_IS_PRIMARY = "isPrimary"
FEATURE_IS_VISIBLE = "isVisible"
FEATURE_IS_SUGGEST = "isSuggest"
FEATURE_IS_UPDATED = "isUpdated"
FEATURE_IS_CURRENCY = "isCurrency"
FEATURE_IS_REQUIRED = "isRequired"
FEATURE_IS_EDITABLE = "isEditable"
FEATURE_IS_LATITUDE = "isLatitude"
FEATURE_IS_LONGITUDE = "isLongitude"
FEATURE_IS_MULTIVALUE = "isMultiValue"
FEATURE_MV_DELIMITER = "delimiterChar"
FEATURE_UI_FORMAT = "uiFormat"
FEATURE_DATA_FORMAT = "dataFormat"
FEATURE_DATA_DESCRIPTION = "dataDescription"

FEATURE_IS_GRAPH_TYPE = "isGraphType"
FEATURE_IS_GRAPH_LABEL = "isGraphLabel"
FEATURE_IS_GRAPH_TITLE = "isGraphTitle"
FEATURE_IS_GRAPH_WEIGHT = "isGraphWeight"

STANDARD_FEATURES = frozenset([
    FEATURE_IS_SECRET, FEATURE_IS_STORED, FEATURE_IS_HIDDEN,
    FEATURE_IS_SEARCH, FEATURE_IS_PRIMARY, FEATURE_IS_VISIBLE,
    FEATURE_IS_SUGGEST, FEATURE_IS_UPDATED, FEATURE_IS_REQUIRED,
    FEATURE_IS_LATITUDE, FEATURE_IS_LONGITUDE,
])

# ========================================
# Graph projection columns
# ========================================

GRAPH_COMMON_PREFIX = "common_"
GRAPH_COMMON_ID = GRAPH_COMMON_PREFIX + "id"
GRAPH_COMMON_ID_TITLE = "Id"
GRAPH_COMMON_NAME = GRAPH_COMMON_PREFIX + "name"
GRAPH_COMMON_TITLE = "Name"
GRAPH_VERTEX_LABEL_NAME = GRAPH_COMMON_PREFIX + "vertex_label"
GRAPH_VERTEX_LABEL_TITLE = "Label"
GRAPH_EDGE_TYPE_NAME = GRAPH_COMMON_PREFIX + "type"
GRAPH_EDGE_TYPE_TITLE = "Edge Type"
GRAPH_EDGE_WEIGHT_NAME = "edge_weight"
GRAPH_EDGE_WEIGHT_TITLE = "Edge Weight"
GRAPH_SRC_VERTEX_ID_NAME = GRAPH_COMMON_PREFIX + "vertex_src_id"
GRAPH_SRC_VERTEX_ID_TITLE = "Vertex Src Id"
GRAPH_DST_VERTEX_ID_NAME = GRAPH_COMMON_PREFIX + "vertex_dst_id"
GRAPH_DST_VERTEX_ID_TITLE = "Vertex Dst Id"

# ========================================
# Diff and validation
# ========================================

DIFF_STATUS_ADDED = "Added"
DIFF_STATUS_UPDATED = "Updated"
DIFF_STATUS_DELETED = "Deleted"
DIFF_STATUS_UNCHANGED = "Unchanged"

VALIDATION_MESSAGE_DEFAULT = "One or more items are invalid."
VALIDATION_MESSAGE_IS_REQUIRED = "A value must be assigned."
VALIDATION_MESSAGE_OUT_OF_RANGE = "The value is out of range."
VALIDATION_MESSAGE_ITEM_CHANGED = "The item value has changed."

MULTI_VALUE_DELIMITER = "|"

_TYPE_CHARS = {
    DataType.TEXT: "T",
    DataType.INTEGER: "I",
    DataType.LONG: "L",
    DataType.FLOAT: "F",
    DataType.DOUBLE: "D",
    DataType.BOOLEAN: "B",
    DataType.DATE: "E",
    DataType.DATETIME: "C",
}
_CHAR_TYPES = {char: data_type for data_type, char in _TYPE_CHARS.items()}


# ========================================
# Type helpers
# ========================================

def type_to_string(data_type: DataType) -> str:
    return data_type.value


def string_to_type(text: str) -> DataType:
    """
    Resolve a type name such as "Integer" back to its DataType.

    Raises:
        ValueError: If the name is not a known type
    """
    return DataType(text)


def type_to_char(data_type: DataType) -> str:
    """Single character code of a type ('U' for Undefined)."""
    return _TYPE_CHARS.get(data_type, "U")


def char_to_type(char: str) -> DataType:
    return _CHAR_TYPES.get(char, DataType.UNDEFINED)


def is_number(data_type: DataType) -> bool:
    return data_type in (DataType.INTEGER, DataType.LONG, DataType.FLOAT, DataType.DOUBLE)


def is_integral(data_type: DataType) -> bool:
    return data_type in (DataType.INTEGER, DataType.LONG)


def is_boolean(data_type: DataType) -> bool:
    return data_type == DataType.BOOLEAN


def is_text(data_type: DataType) -> bool:
    return data_type == DataType.TEXT


def is_date_or_time(data_type: DataType) -> bool:
    return data_type in (DataType.DATE, DataType.DATETIME)


def default_format(data_type: DataType) -> Optional[str]:
    """Default data format assigned when a cell's type is set."""
    if data_type == DataType.DATE:
        return FORMAT_DATE_DEFAULT
    if data_type == DataType.DATETIME:
        return FORMAT_DATETIME_DEFAULT
    if is_integral(data_type):
        return FORMAT_INTEGER_PLAIN
    if data_type in (DataType.FLOAT, DataType.DOUBLE):
        return FORMAT_DOUBLE_POINT
    return None


def string_to_boolean(text: Optional[str]) -> bool:
    """True for "true", "yes" or "1" in any case."""
    if not text:
        return False
    return text.strip().lower() in ("true", "yes", "1")


def boolean_to_string(flag: bool) -> str:
    return FEATURE_TRUE if flag else FEATURE_FALSE


# ========================================
# Name/title conversion
# ========================================

def name_to_title(name: str) -> str:
    """
    Derive a display title from an item name.

    Example:
        name_to_title("employee_name")   # "Employee Name"
        name_to_title("employee.name")   # "Employee Name"
        name_to_title("federatedName")   # "Federated Name"
    """
    if not name:
        return name

    chars = []
    last_space = True
    last_lower = False
    for ch in name:
        if ch in ("_", "."):
            ch = " "
            chars.append(ch)
        elif last_space:
            chars.append(ch.upper())
        elif ch.isupper() and last_lower:
            chars.append(" ")
            chars.append(ch)
        else:
            chars.append(ch)
        last_space = ch == " "
        last_lower = ch.islower()

    return "".join(chars)


_NAME_SEPARATORS = re.compile(r"[ .\-/()\[\]]")


def title_to_name(title: str) -> str:
    """
    Derive an item name from a display title.

    Example:
        title_to_name("Birth Year(s)")   # "birth_years"
        title_to_name("Ship-To Address") # "ship_to_address"
    """
    if not title:
        return title

    name = title.lower().replace(" ", "_")
    if name.endswith("(s)"):
        name = name.replace("(s)", "s")
    name = _NAME_SEPARATORS.sub("_", name)
    name = re.sub(r"_+", "_", name)
    if name.endswith("_"):
        name = name[:-1]
    return name


# ========================================
# Multi-value collapse/expand
# ========================================

def collapse_values(values: List[str], delimiter: str = MULTI_VALUE_DELIMITER) -> str:
    """
    Join values into one string, escaping delimiters inside values.

    Args:
        values: Values to join
        delimiter: Single separator character

    Returns:
        Collapsed string, empty when there are no values
    """
    escaped = []
    for value in values:
        value = value.replace("\\", "\\\\")
        escaped.append(value.replace(delimiter, "\\" + delimiter))
    return delimiter.join(escaped)


def expand_values(text: str, delimiter: str = MULTI_VALUE_DELIMITER) -> List[str]:
    """
    Split a collapsed string back into values.

    Inverse of collapse_values(); an empty string expands to no values.
    """
    if not text:
        return []

    values = []
    current = []
    escaping = False
    for ch in text:
        if escaping:
            current.append(ch)
            escaping = False
        elif ch == "\\":
            escaping = True
        elif ch == delimiter:
            values.append("".join(current))
            current = []
        else:
            current.append(ch)
    if escaping:
        current.append("\\")
    values.append("".join(current))
    return values


# ========================================
# Value inference
# ========================================

_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)$")
_INT32_MIN = -2 ** 31
_INT32_MAX = 2 ** 31 - 1


def is_parsable_number(text: Optional[str]) -> bool:
    """True for plain decimal numbers such as "42", "-3.5" or ".25"."""
    return bool(text) and _NUMBER_PATTERN.match(text.strip()) is not None


def detect_datetime_format(text: Optional[str]) -> Optional[str]:
    """
    Try the known date/time layouts against a string.

    Returns:
        The first layout that parses the string, otherwise None
    """
    if not text:
        return None
    for layout in DATETIME_PARSE_FORMATS:
        try:
            datetime.strptime(text.strip(), layout)
        except ValueError:
            continue
        return layout
    return None


def detect_datetime(text: Optional[str]) -> Optional[datetime]:
    layout = detect_datetime_format(text)
    if layout is None:
        return None
    return datetime.strptime(text.strip(), layout)


def type_of_object(value) -> DataType:
    """
    Map a Python value to the DataType it is stored as.

    bool is checked before int since it is an int subclass; integers
    outside the 32-bit range become Long.
    """
    if isinstance(value, bool):
        return DataType.BOOLEAN
    if isinstance(value, int):
        if _INT32_MIN <= value <= _INT32_MAX:
            return DataType.INTEGER
        return DataType.LONG
    if isinstance(value, float):
        return DataType.DOUBLE
    if isinstance(value, datetime):
        return DataType.DATETIME
    if isinstance(value, date):
        return DataType.DATE
    return DataType.TEXT
