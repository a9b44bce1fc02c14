"""
Store field names.

A ValueCell stored as a field of a hash is named

    ItemName:DataType:ValueType:ValueFormat

so that the cell's type and flags travel with the stored value. Field
names that do not follow this grammar decode as plain Text cells.
"""

from dataclasses import dataclass
from typing import Optional

from recordkit.config import DEFAULT_DELIMITER
from recordkit.core.data import DataType, FEATURE_IS_MULTIVALUE, FEATURE_IS_SECRET, name_to_title
from recordkit.core.item import ValueCell, ValueCellBuilder
from recordkit.naming.codes import (
    DATA_TYPE_KEY, FEATURE_IS_KEY, VALUE_ENCRYPTED, VALUE_MULTI, VALUE_PLAIN,
    VALUE_SINGLE, code_to_data_type, data_type_to_code,
)

# name, data type, value type, value format
_FIELD_SEGMENTS = 4


@dataclass(frozen=True)
class StoreField:
    """
    Decoded field name.

    Attributes:
        item_name: Cell name without delimiter characters
        data_type: Cell type (Text for key fields and plain names)
        multi_value: Cell holds several values
        secret: Cell value is stored encrypted
        is_key: Field holds a key reference rather than a value
        encoded: Name followed the four segment grammar

    Example:
        StoreField.name_of(age_cell)          # "age:IN:S:P"
        StoreField.parse("age:IN:S:P").data_type   # DataType.INTEGER
    """
    item_name: str
    data_type: DataType = DataType.TEXT
    multi_value: bool = False
    secret: bool = False
    is_key: bool = False
    encoded: bool = True

    @property
    def name(self) -> str:
        if not self.encoded:
            return self.item_name
        data_type = DATA_TYPE_KEY if self.is_key else data_type_to_code(self.data_type)
        return DEFAULT_DELIMITER.join([
            self.item_name,
            data_type,
            VALUE_MULTI if self.multi_value else VALUE_SINGLE,
            VALUE_ENCRYPTED if self.secret else VALUE_PLAIN,
        ])

    @classmethod
    def of(cls, cell: ValueCell) -> 'StoreField':
        """Field describing a cell; delimiter characters are dropped from the name."""
        return cls(
            item_name=cell.name.replace(DEFAULT_DELIMITER, ""),
            data_type=cell.type,
            multi_value=cell.is_multi_value(),
            secret=cell.is_feature_true(FEATURE_IS_SECRET),
            is_key=cell.is_feature_true(FEATURE_IS_KEY),
        )

    @classmethod
    def name_of(cls, cell: ValueCell) -> str:
        return cls.of(cell).name

    @classmethod
    def parse(cls, text: str) -> 'StoreField':
        """
        Decode a field name.

        Names with fewer than four segments are kept whole as a plain Text
        field. A "KE" data type marks a key field, whose remaining segments
        are ignored.
        """
        segments = text.split(DEFAULT_DELIMITER)
        if len(segments) < _FIELD_SEGMENTS:
            return cls(item_name=text, encoded=False)
        item_name, type_code, value_type, value_format = segments[:_FIELD_SEGMENTS]
        if type_code == DATA_TYPE_KEY:
            return cls(item_name=item_name, is_key=True)
        return cls(
            item_name=item_name,
            data_type=code_to_data_type(type_code),
            multi_value=value_type == VALUE_MULTI,
            secret=value_format == VALUE_ENCRYPTED,
        )

    def to_value_cell(self) -> Optional[ValueCell]:
        """Empty ValueCell carrying the decoded type and flags."""
        if not self.item_name:
            return None
        cell = ValueCellBuilder().type(self.data_type).name(self.item_name) \
            .title(name_to_title(self.item_name)).build()
        if self.is_key:
            cell.enable_feature(FEATURE_IS_KEY)
        if self.multi_value:
            cell.enable_feature(FEATURE_IS_MULTIVALUE)
        if self.secret:
            cell.enable_feature(FEATURE_IS_SECRET)
        return cell
