"""Store key and field naming."""

from recordkit.naming.codes import DataObject, IdMethod, StoreModule, StoreType
from recordkit.naming.key import KeyBuilder, StoreKey, search_prefix
from recordkit.naming.field import StoreField

__all__ = [
    'DataObject',
    'IdMethod',
    'StoreModule',
    'StoreType',
    'KeyBuilder',
    'StoreKey',
    'search_prefix',
    'StoreField',
]
