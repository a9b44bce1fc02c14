"""
Conversion between schema Records and schema-editing Grids.

A schema Record describes columns: each ValueCell carries a name, type,
title and features. schema_to_grid() lays those descriptions out as rows
of a Grid (one row per cell) and grid_to_schema() rebuilds the Record.
"""

from recordkit.core.data import (
    DataType, FEATURE_IS_HIDDEN, FEATURE_IS_LATITUDE, FEATURE_IS_LONGITUDE,
    FEATURE_IS_PRIMARY, FEATURE_IS_REQUIRED, FEATURE_IS_SEARCH,
    FEATURE_IS_SECRET, FEATURE_IS_SUGGEST, FEATURE_IS_VISIBLE,
    STANDARD_FEATURES, is_parsable_number, name_to_title, string_to_type,
)
from recordkit.core.grid import Grid
from recordkit.core.item import ValueCellBuilder
from recordkit.core.record import Record

ITEM_NAME = "item_name"
ITEM_TYPE = "item_type"
ITEM_TITLE = "item_title"

_FLAG_COLUMNS = (
    (FEATURE_IS_PRIMARY, "Is Primary"),
    (FEATURE_IS_REQUIRED, "Is Required"),
    (FEATURE_IS_VISIBLE, "Is Visible"),
    (FEATURE_IS_SEARCH, "Is Searchable"),
    (FEATURE_IS_SUGGEST, "Is Suggest"),
    (FEATURE_IS_SECRET, "Is Secret"),
    (FEATURE_IS_LATITUDE, "Is Latitude"),
    (FEATURE_IS_LONGITUDE, "Is Longitude"),
    (FEATURE_IS_HIDDEN, "Is Hidden"),
)


def is_feature_standard(name: str) -> bool:
    return name in STANDARD_FEATURES


def create_schema_record(name: str) -> Record:
    """Record describing the columns of a schema-editing grid."""
    schema = Record(name)
    schema.add(ValueCellBuilder().name(ITEM_NAME).title("Item Name").type(DataType.TEXT).build())
    schema.add(ValueCellBuilder().name(ITEM_TYPE).title("Item Type").type(DataType.TEXT).build())
    schema.add(ValueCellBuilder().name(ITEM_TITLE).title("Item Title").type(DataType.TEXT).build())
    for feature, title in _FLAG_COLUMNS:
        schema.add(ValueCellBuilder().name(feature).title(title).type(DataType.BOOLEAN).build())
    return schema


def _feature_type(name: str, value: str) -> DataType:
    if name.startswith("is"):
        return DataType.BOOLEAN
    if is_parsable_number(value):
        return DataType.FLOAT if "." in value else DataType.INTEGER
    return DataType.TEXT


def schema_to_grid(schema: Record, extended: bool = False) -> Grid:
    """
    Lay out a schema Record as a Grid, one row per cell.

    Args:
        schema: Record whose cells describe the columns
        extended: Add a column for every non-standard feature found

    Returns:
        Grid named "<schema> Schema"
    """
    grid = Grid(f"{schema.name} Schema", create_schema_record(f"{schema.name} Schema"))
    if extended:
        for cell in schema:
            for feature, value in cell.features.items():
                if is_feature_standard(feature) or feature in grid.columns:
                    continue
                grid.add_col(ValueCellBuilder().name(feature).title(name_to_title(feature))
                             .type(_feature_type(feature, value)).build())

    for cell in schema:
        grid.new_row()
        grid.set_value_by_name(ITEM_NAME, cell.name)
        grid.set_value_by_name(ITEM_TYPE, cell.type.value)
        grid.set_value_by_name(ITEM_TITLE, cell.title)
        for feature, value in cell.features.items():
            if feature in grid.columns:
                grid.set_value_by_name(feature, value)
        grid.add_row()
    return grid


def grid_to_schema(grid: Grid) -> Record:
    """
    Rebuild a schema Record from a Grid made by schema_to_grid().

    Rows missing a name, type or title are ignored, as are repeated names.
    Every non-empty column other than item_* becomes a feature.
    """
    schema = Record(grid.name)
    for row in grid:
        name = row.get_value_by_name(ITEM_NAME)
        type_name = row.get_value_by_name(ITEM_TYPE)
        title = row.get_value_by_name(ITEM_TITLE)
        if not (name and type_name and title) or name in schema:
            continue
        cell = ValueCellBuilder().name(name).title(title).type(string_to_type(type_name)).build()
        cell.clear_features()
        for column in row:
            if column.name.startswith("item_") or not column.get_value():
                continue
            cell.add_feature(column.name, column.get_value())
        schema.add(cell)
    return schema
