"""
Two-letter codes that make up a store key.

A key reads, left to right:

    prefix : module : store type : data object : id method : name [: id]
           [: data type : value type : value format]     (ValueCell keys only)
"""

from enum import Enum
from typing import Dict

from recordkit.core.data import DataType


FEATURE_KEY_NAME = "redis_key_name"
FEATURE_IS_KEY = "isKey"


class StoreModule(Enum):
    CORE = "RC"
    JSON = "RJ"
    GRAPH = "RG"
    SEARCH = "RS"
    TIME_SERIES = "RT"


class StoreType(Enum):
    SET = "SE"
    HASH = "HA"
    STRING = "SG"
    STREAM = "SM"
    HYPER_LOG = "HL"
    SORTED_SET = "SS"
    TIME_SERIES = "TS"
    SEARCH_INDEX = "SI"
    SEARCH_SCHEMA = "SC"
    SEARCH_SUGGEST = "SU"
    SEARCH_SYNONYM = "SY"
    JSON_SCHEMA = "JS"
    JSON_DOCUMENT = "JD"
    GRAPH_SCHEMA = "GS"
    GRAPH_PROPERTY = "GP"


class DataObject(Enum):
    ITEM = "DI"
    DOCUMENT = "DD"
    GRID = "DT"
    GRAPH = "DG"


class IdMethod(Enum):
    NAME = "MN"
    HASH = "MH"
    RANDOM = "MR"
    PRIMARY = "MP"

    def carries_id(self) -> bool:
        return self != IdMethod.NAME


VALUE_SINGLE = "S"
VALUE_MULTI = "M"
VALUE_PLAIN = "P"
VALUE_ENCRYPTED = "E"

DATA_TYPE_KEY = "KE"

_DATA_TYPE_CODES: Dict[DataType, str] = {
    DataType.TEXT: "TE",
    DataType.INTEGER: "IN",
    DataType.LONG: "LO",
    DataType.FLOAT: "FL",
    DataType.DOUBLE: "DO",
    DataType.BOOLEAN: "BO",
    DataType.DATE: "DA",
    DataType.DATETIME: "DT",
}
_CODE_DATA_TYPES = {code: data_type for data_type, code in _DATA_TYPE_CODES.items()}


def data_type_to_code(data_type: DataType) -> str:
    """Two-letter code of a data type; anything unmapped is Text."""
    return _DATA_TYPE_CODES.get(data_type, _DATA_TYPE_CODES[DataType.TEXT])


def code_to_data_type(code: str) -> DataType:
    """Data type of a two-letter code; unknown codes decode as Text."""
    return _CODE_DATA_TYPES.get(code, DataType.TEXT)
