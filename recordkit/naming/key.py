"""
Store keys: deterministic string names for records, cells, grids and graphs.

KeyBuilder collects the key segments fluently and produces an immutable
StoreKey. StoreKey.name is computed from the key's fields every time it
is read, and StoreKey.parse() decodes a key string back into a StoreKey
that can rebuild an empty skeleton of the object it names.

Example:
    key = (KeyBuilder(NamingConfig("APP"))
           .module_core().store_hash()
           .data_object(customer).hash_id()
           .build())
    key.name            # "APP:RC:HA:DD:MH:customer:3f1c..."

    StoreKey.parse(key.name).to_record().name   # "customer"
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Union
from uuid import uuid4
import logging

from recordkit.config import NamingConfig
from recordkit.core.data import DataType, FEATURE_IS_MULTIVALUE, FEATURE_IS_PRIMARY, FEATURE_IS_SECRET, name_to_title
from recordkit.core.graph import RecordGraph
from recordkit.core.grid import Grid
from recordkit.core.item import ValueCell, ValueCellBuilder
from recordkit.core.record import Record
from recordkit.exceptions import HashUnavailableError, MalformedKeyError
from recordkit.naming.codes import (
    FEATURE_KEY_NAME, VALUE_ENCRYPTED, VALUE_MULTI, VALUE_PLAIN, VALUE_SINGLE,
    DataObject, IdMethod, StoreModule, StoreType, code_to_data_type, data_type_to_code,
)

logger = logging.getLogger(__name__)

DataObjectPayload = Union[ValueCell, Record, Grid, RecordGraph]

# prefix, module, store type, data object, method, name
_REQUIRED_SEGMENTS = 6


def _enum_or_none(enum_type, code: str, text: str):
    if not code:
        return None
    try:
        return enum_type(code)
    except ValueError:
        raise MalformedKeyError(f"[{text}]: Unknown {enum_type.__name__} code '{code}'") from None


@dataclass(frozen=True)
class StoreKey:
    """
    Immutable store key.

    Attributes:
        config: Naming configuration (prefix and delimiter)
        module: Store module, None when not assigned
        store_type: Store data structure, None when not assigned
        data_object: Kind of object the key names
        method: How the id segment was derived
        data_name: Name of the object
        id: Identity segment (empty for IdMethod.NAME)
        data_type: ValueCell type, only set for ValueCell keys
        multi_value: ValueCell holds several values
        secret: ValueCell value is stored encrypted
    """
    config: NamingConfig
    module: Optional[StoreModule]
    store_type: Optional[StoreType]
    data_object: DataObject
    method: IdMethod
    data_name: str
    id: str = ""
    data_type: Optional[DataType] = None
    multi_value: bool = False
    secret: bool = False

    @property
    def prefix(self) -> str:
        return self.config.app_prefix

    @property
    def name(self) -> str:
        """The encoded key string."""
        segments: List[str] = [
            self.config.app_prefix,
            self.module.value if self.module else "",
            self.store_type.value if self.store_type else "",
            self.data_object.value,
            self.method.value,
            self.data_name,
        ]
        if self.id:
            segments.append(self.id)
        if self.data_type is not None:
            segments.append(data_type_to_code(self.data_type))
            segments.append(VALUE_MULTI if self.multi_value else VALUE_SINGLE)
            segments.append(VALUE_ENCRYPTED if self.secret else VALUE_PLAIN)
        return self.config.delimiter.join(segments)

    def __str__(self) -> str:
        return self.name

    # ========================================
    # Decoding
    # ========================================

    @classmethod
    def parse(cls, text: str, config: Optional[NamingConfig] = None) -> 'StoreKey':
        """
        Decode a key string.

        The id segment is only read for id methods that produce one, and
        ValueCell keys additionally carry data type, value type and value
        format segments.

        Args:
            text: Encoded key
            config: Supplies the delimiter; the prefix is taken from the key

        Returns:
            StoreKey; its name reproduces any key made by KeyBuilder

        Raises:
            MalformedKeyError: If the key has too few segments or unknown codes
        """
        config = config or NamingConfig()
        delimiter = config.delimiter
        separator_count = text.count(delimiter)
        if separator_count < _REQUIRED_SEGMENTS - 1:
            logger.error("[%s]: Incorrectly formatted with separator count of %d.", text, separator_count)
            raise MalformedKeyError(
                f"[{text}]: Incorrectly formatted with separator count of {separator_count}.")

        segments = text.split(delimiter)
        prefix, module, store_type, data_object, method, data_name = segments[:_REQUIRED_SEGMENTS]
        if not prefix:
            raise MalformedKeyError(f"[{text}]: Missing application prefix")
        offset = _REQUIRED_SEGMENTS

        id_method = _enum_or_none(IdMethod, method, text)
        if id_method is None:
            raise MalformedKeyError(f"[{text}]: Missing id method")
        key_id = ""
        if id_method.carries_id() and offset < len(segments):
            key_id = segments[offset]
            offset += 1

        kind = _enum_or_none(DataObject, data_object, text)
        if kind is None:
            raise MalformedKeyError(f"[{text}]: Missing data object")

        data_type = None
        multi_value = secret = False
        trailing = segments[offset:]
        if kind == DataObject.ITEM and trailing:
            if len(trailing) < 3:
                raise MalformedKeyError(f"[{text}]: Incomplete item type segments")
            data_type = code_to_data_type(trailing[0])
            multi_value = trailing[1] == VALUE_MULTI
            secret = trailing[2] == VALUE_ENCRYPTED

        return cls(
            config=config.with_prefix(prefix),
            module=_enum_or_none(StoreModule, module, text),
            store_type=_enum_or_none(StoreType, store_type, text),
            data_object=kind,
            method=id_method,
            data_name=data_name,
            id=key_id,
            data_type=data_type,
            multi_value=multi_value,
            secret=secret,
        )

    # ========================================
    # Skeleton reconstruction
    # ========================================

    def to_value_cell(self) -> Optional[ValueCell]:
        """Empty ValueCell described by an item key, None for other keys."""
        if self.data_object != DataObject.ITEM or self.data_type is None:
            return None
        cell = ValueCellBuilder().type(self.data_type).name(self.data_name) \
            .title(name_to_title(self.data_name)).build()
        if self.multi_value:
            cell.enable_feature(FEATURE_IS_MULTIVALUE)
        if self.secret:
            cell.enable_feature(FEATURE_IS_SECRET)
        cell.add_feature(FEATURE_KEY_NAME, self.name)
        return cell

    def to_record(self) -> Optional[Record]:
        """Empty Record named by a document key, None for other keys."""
        if self.data_object != DataObject.DOCUMENT:
            return None
        record = Record(self.data_name)
        record.add_feature(FEATURE_KEY_NAME, self.name)
        return record

    def to_grid(self) -> Optional[Grid]:
        """Empty Grid named by a grid key, None for other keys."""
        if self.data_object != DataObject.GRID:
            return None
        grid = Grid(self.data_name)
        grid.add_feature(FEATURE_KEY_NAME, self.name)
        return grid

    def to_graph(self) -> Optional[RecordGraph]:
        """Empty RecordGraph named by a graph key, None for other keys."""
        if self.data_object != DataObject.GRAPH:
            return None
        graph = RecordGraph(self.data_name)
        graph.add_feature(FEATURE_KEY_NAME, self.name)
        return graph


def search_prefix(module: StoreModule, config: Optional[NamingConfig] = None) -> str:
    """
    Key prefix matching every searchable key of a module.

    JSON documents are matched by their document type, everything else
    by the hash type.
    """
    config = config or NamingConfig()
    store_type = StoreType.JSON_DOCUMENT if module == StoreModule.JSON else StoreType.HASH
    d = config.delimiter
    return f"{config.app_prefix}{d}{module.value}{d}{store_type.value}{d}"


class KeyBuilder:
    """
    Fluent construction of StoreKeys.

    Selecting a module starts a new key. The identity is derived when
    build() is called, so a hash id always reflects the payload at that
    moment.

    Example:
        key = (KeyBuilder()
               .module_json().store_json_document()
               .data_object(order).primary_id()
               .build())
    """

    def __init__(self, config: Optional[NamingConfig] = None):
        self.config = config or NamingConfig()
        self.reset()

    def reset(self) -> 'KeyBuilder':
        self._module: Optional[StoreModule] = None
        self._store_type: Optional[StoreType] = None
        self._data_object = DataObject.DOCUMENT
        self._payload: Optional[DataObjectPayload] = None
        self._data_name = ""
        self._method = IdMethod.NAME
        self._explicit_id: Optional[str] = None
        self._fallback_random = False
        return self

    # ========================================
    # Module and store type
    # ========================================

    def module(self, module: StoreModule) -> 'KeyBuilder':
        """Start a new key for the given module."""
        self.reset()
        self._module = module
        return self

    def module_core(self) -> 'KeyBuilder':
        return self.module(StoreModule.CORE)

    def module_json(self) -> 'KeyBuilder':
        return self.module(StoreModule.JSON)

    def module_graph(self) -> 'KeyBuilder':
        return self.module(StoreModule.GRAPH)

    def module_search(self) -> 'KeyBuilder':
        return self.module(StoreModule.SEARCH)

    def module_time_series(self) -> 'KeyBuilder':
        return self.module(StoreModule.TIME_SERIES)

    def store_type(self, store_type: StoreType) -> 'KeyBuilder':
        self._store_type = store_type
        return self

    def store_set(self) -> 'KeyBuilder':
        return self.store_type(StoreType.SET)

    def store_hash(self) -> 'KeyBuilder':
        return self.store_type(StoreType.HASH)

    def store_string(self) -> 'KeyBuilder':
        return self.store_type(StoreType.STRING)

    def store_stream(self) -> 'KeyBuilder':
        return self.store_type(StoreType.STREAM)

    def store_hyper_log(self) -> 'KeyBuilder':
        return self.store_type(StoreType.HYPER_LOG)

    def store_sorted_set(self) -> 'KeyBuilder':
        return self.store_type(StoreType.SORTED_SET)

    def store_time_series(self) -> 'KeyBuilder':
        return self.store_type(StoreType.TIME_SERIES)

    def store_search_index(self) -> 'KeyBuilder':
        return self.store_type(StoreType.SEARCH_INDEX)

    def store_search_schema(self) -> 'KeyBuilder':
        return self.store_type(StoreType.SEARCH_SCHEMA)

    def store_search_suggest(self) -> 'KeyBuilder':
        return self.store_type(StoreType.SEARCH_SUGGEST)

    def store_search_synonym(self) -> 'KeyBuilder':
        return self.store_type(StoreType.SEARCH_SYNONYM)

    def store_json_schema(self) -> 'KeyBuilder':
        return self.store_type(StoreType.JSON_SCHEMA)

    def store_json_document(self) -> 'KeyBuilder':
        return self.store_type(StoreType.JSON_DOCUMENT)

    def store_graph_schema(self) -> 'KeyBuilder':
        return self.store_type(StoreType.GRAPH_SCHEMA)

    def store_graph(self) -> 'KeyBuilder':
        return self.store_type(StoreType.GRAPH_PROPERTY)

    # ========================================
    # Data object
    # ========================================

    def data_object(self, payload: DataObjectPayload) -> 'KeyBuilder':
        """
        Name the key after a ValueCell, Record, Grid or RecordGraph.

        Raises:
            TypeError: For any other object
        """
        if isinstance(payload, ValueCell):
            kind = DataObject.ITEM
        elif isinstance(payload, Record):
            kind = DataObject.DOCUMENT
        elif isinstance(payload, Grid):
            kind = DataObject.GRID
        elif isinstance(payload, RecordGraph):
            kind = DataObject.GRAPH
        else:
            raise TypeError(f"Cannot derive a store key from {type(payload).__name__}")
        self._payload = payload
        self._data_object = kind
        self._data_name = payload.name
        return self

    def data_name(self, name: str) -> 'KeyBuilder':
        self._data_name = name
        return self

    # ========================================
    # Identity
    # ========================================

    def hash_id(self, fallback_random: bool = False) -> 'KeyBuilder':
        """
        Use the payload's content hash as the id.

        Args:
            fallback_random: Use a random id instead of failing when the
                             digest is unavailable
        """
        self._method = IdMethod.HASH
        self._explicit_id = None
        self._fallback_random = fallback_random
        return self

    def random_id(self) -> 'KeyBuilder':
        self._method = IdMethod.RANDOM
        self._explicit_id = None
        return self

    def primary_id(self, value: Optional[str] = None) -> 'KeyBuilder':
        """
        Use a natural key as the id.

        Without a value the first primary-flagged item of a Record payload
        is used; when there is none the key falls back to a random id.
        """
        self._method = IdMethod.PRIMARY
        self._explicit_id = value
        return self

    def _payload_hash(self) -> str:
        payload = self._payload
        if isinstance(payload, Record):
            return payload.generate_unique_hash(False)
        if isinstance(payload, Grid):
            return payload.columns.generate_unique_hash(False)
        if payload is not None:
            return payload.hash_id()
        return ""

    def _derive_id(self):
        if self._method == IdMethod.RANDOM:
            return IdMethod.RANDOM, str(uuid4())
        if self._method == IdMethod.PRIMARY:
            if self._explicit_id:
                return IdMethod.PRIMARY, self._explicit_id
            if isinstance(self._payload, Record):
                primary = self._payload.get_first_item_by_feature_name(FEATURE_IS_PRIMARY)
                if primary is not None and primary.get_value():
                    return IdMethod.PRIMARY, primary.get_value()
            return IdMethod.RANDOM, str(uuid4())
        if self._method == IdMethod.HASH:
            try:
                return IdMethod.HASH, self._payload_hash()
            except HashUnavailableError:
                if not self._fallback_random:
                    raise
                logger.warning("Content hash unavailable for '%s', using a random id", self._data_name)
                return IdMethod.RANDOM, str(uuid4())
        return IdMethod.NAME, ""

    def build(self) -> StoreKey:
        """
        Create the StoreKey.

        Raises:
            MalformedKeyError: If the name or id is empty or contains the delimiter
            HashUnavailableError: If a hash id cannot be computed and no
                                  random fallback was requested
        """
        method, key_id = self._derive_id()
        delimiter = self.config.delimiter
        if not self._data_name:
            raise MalformedKeyError("A store key needs a data name")
        if delimiter in self._data_name or delimiter in key_id:
            raise MalformedKeyError(
                f"Key name '{self._data_name}' or id '{key_id}' contains the delimiter '{delimiter}'")

        key = StoreKey(
            config=self.config,
            module=self._module,
            store_type=self._store_type,
            data_object=self._data_object,
            method=method,
            data_name=self._data_name,
            id=key_id,
        )
        if isinstance(self._payload, ValueCell):
            key = replace(key,
                          data_type=self._payload.type,
                          multi_value=self._payload.is_multi_value(),
                          secret=self._payload.is_feature_true(FEATURE_IS_SECRET))
        return key
