"""
RecordKit: a self-describing record model with deterministic store keys.

Typed multi-value cells are grouped into records, records into grids and
graphs, and any of them can be given a stable colon-delimited key for use
in an external key-value store.
"""

__version__ = "0.1.0"
__author__ = "Deed Project"

from recordkit.config import NamingConfig
from recordkit.core.item import ValueCell, ValueCellBuilder
from recordkit.core.record import Record, ValidationResult, ComparisonResult
from recordkit.core.grid import Grid
from recordkit.core.graph import RecordGraph
from recordkit.core.edge import GraphEdge
from recordkit.naming.key import KeyBuilder, StoreKey
from recordkit.naming.field import StoreField

__all__ = [
    'NamingConfig',
    'ValueCell',
    'ValueCellBuilder',
    'Record',
    'ValidationResult',
    'ComparisonResult',
    'Grid',
    'RecordGraph',
    'GraphEdge',
    'KeyBuilder',
    'StoreKey',
    'StoreField',
]
