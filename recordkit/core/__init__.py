"""Core record model: cells, records, grids and graphs."""

from recordkit.core.data import DataType, SortOrder, GraphStructure, GraphDataModel
from recordkit.core.range import ValueRange
from recordkit.core.item import ValueCell, ValueCellBuilder
from recordkit.core.record import Record, ValidationResult, ComparisonResult
from recordkit.core.grid import Grid, ColumnStatistics
from recordkit.core.diff import RecordDiff
from recordkit.core.analyzer import ItemAnalyzer, GridAnalyzer
from recordkit.core.edge import GraphEdge
from recordkit.core.graph import RecordGraph

__all__ = [
    'DataType',
    'SortOrder',
    'GraphStructure',
    'GraphDataModel',
    'ValueRange',
    'ValueCell',
    'ValueCellBuilder',
    'Record',
    'ValidationResult',
    'ComparisonResult',
    'Grid',
    'ColumnStatistics',
    'RecordDiff',
    'ItemAnalyzer',
    'GridAnalyzer',
    'GraphEdge',
    'RecordGraph',
]
