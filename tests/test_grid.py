"""Tests for Grid rows, merging, sorting and statistics."""

import math

import pytest

from recordkit.core.data import DataType, SortOrder
from recordkit.core.grid import Grid
from recordkit.core.item import ValueCellBuilder
from recordkit.core.record import Record
from recordkit.exceptions import NotFoundError, SchemaError


def _schema():
    schema = Record("people")
    schema.add(ValueCellBuilder().name("id").type(DataType.INTEGER).is_primary().build())
    schema.add(ValueCellBuilder().name("name").type(DataType.TEXT).build())
    schema.add(ValueCellBuilder().name("score").type(DataType.DOUBLE).build())
    schema.add(ValueCellBuilder().name("joined").type(DataType.DATE).build())
    return schema


def _add(grid, row_id, name, score=None, joined=None):
    grid.new_row()
    grid.set_value_by_name("id", row_id)
    grid.set_value_by_name("name", name)
    if score is not None:
        grid.set_value_by_name("score", score)
    if joined is not None:
        grid.set_value_by_name("joined", joined)
    grid.add_row()


@pytest.fixture
def grid():
    people = Grid("people", _schema())
    _add(people, 3, "Charles", 71.5, "Mar-01-2021")
    _add(people, 1, "Ada", 98.0, "Jan-15-2020")
    _add(people, 2, "Grace", 85.25, "Feb-10-2019")
    return people


# ---- Schema ----


class TestSchema:
    def test_columns(self, grid):
        assert grid.column_names() == ["id", "name", "score", "joined"]
        assert grid.col_count() == 4

    def test_columns_fixed_once_rows_exist(self, grid):
        with pytest.raises(SchemaError):
            grid.set_columns(Record("other"))
        assert not grid.add_col(ValueCellBuilder().name("extra").build())

    def test_first_record_defines_schema(self):
        record = Record("row")
        record.add(ValueCellBuilder().name("a").value("x").build())
        people = Grid.from_records("derived", [record])
        assert people.column_names() == ["a"]
        assert people.row_count() == 1
        assert not people.columns.get_item_by_name("a").is_value_assigned()

    def test_unknown_column(self, grid):
        with pytest.raises(NotFoundError):
            grid.set_value_by_name("missing", "x")


# ---- Rows ----


class TestRows:
    def test_row_as_record(self, grid):
        row = grid.get_row_as_record(1)
        assert row.name == "people [Row 2]"
        assert row.get_value_by_name("name") == "Ada"
        assert row.get_value_as_int("id") == 1

    def test_row_is_a_snapshot(self, grid):
        row = grid.get_row_as_record(0)
        row.set_value_by_name("name", "Changed")
        assert grid.get_row_as_record(0).get_value_by_name("name") == "Charles"
        grid.update_row(0, row)
        assert grid.get_row_as_record(0).get_value_by_name("name") == "Changed"

    def test_out_of_range(self, grid):
        with pytest.raises(NotFoundError):
            grid.get_row_as_record(3)
        assert grid.get_row_as_record_optional(3) is None
        assert not grid.delete_row(3)

    def test_insert_row(self, grid):
        record = grid.get_row_as_record(0)
        record.set_value_by_name("name", "Inserted")
        assert grid.insert_row(0, record)
        assert grid.get_row_as_record(0).get_value_by_name("name") == "Inserted"
        assert grid.row_count() == 4

    def test_update_by_primary_key(self, grid):
        record = grid.get_row_as_record(2)
        record.set_value_by_name("score", 90.0)
        assert grid.update(record)
        assert grid.get_row_as_record(2).get_value_as_float("score") == 90.0

    def test_delete_by_primary_key(self, grid):
        assert grid.delete(grid.get_row_as_record(1))
        assert [r.get_value_by_name("name") for r in grid] == ["Charles", "Grace"]

    def test_update_without_primary_key(self, grid):
        record = Record("loose")
        record.add(ValueCellBuilder().name("name").value("Nobody").build())
        assert not grid.update(record)
        assert not grid.delete(record)

    def test_set_value_by_row(self, grid):
        grid.set_value_by_row_name(0, "name", "Babbage")
        grid.set_value_by_row_col(1, 2, 50.5)
        assert grid.get_item_by_row_name(0, "name").get_value() == "Babbage"
        assert grid.get_item_by_row_col(1, 2).get_value() == "50.5"
        with pytest.raises(NotFoundError):
            grid.set_value_by_row_name(9, "name", "x")

    def test_values_equal(self, grid):
        assert grid.is_grid_row_values_equal(grid.copy()).is_equal
        other = grid.copy()
        other.set_value_by_row_name(0, "name", "Babbage")
        assert other.is_grid_row_values_equal(grid).changed == ["Row 0"]


# ---- Merging ----


class TestAddRows:
    def test_skips_known_primary_keys(self, grid):
        incoming = Grid("incoming", _schema())
        _add(incoming, 1, "Ada Again")
        _add(incoming, 4, "Edsger")
        _add(incoming, 4, "Edsger Twice")
        assert grid.add_rows(incoming)
        assert grid.row_count() == 4
        assert grid.get_row_as_record(3).get_value_by_name("name") == "Edsger"

    def test_schema_mismatch(self, grid):
        other = Grid("other")
        other.add_col(ValueCellBuilder().name("id").type(DataType.INTEGER).build())
        other.add_row(other.columns.copy())
        other.set_value_by_row_name(0, "id", 9)
        assert not grid.add_rows(other)
        assert grid.row_count() == 3

    def test_nothing_new(self, grid):
        assert not grid.add_rows(grid.copy())


# ---- Sorting ----


class TestSort:
    @pytest.fixture
    def readings(self):
        schema = Record("readings")
        schema.add(ValueCellBuilder().name("id").type(DataType.INTEGER).is_primary().build())
        schema.add(ValueCellBuilder().name("site").type(DataType.TEXT).build())
        schema.add(ValueCellBuilder().name("level").type(DataType.INTEGER).build())
        schema.add(ValueCellBuilder().name("bytes").type(DataType.LONG).build())
        schema.add(ValueCellBuilder().name("ratio").type(DataType.FLOAT).build())
        schema.add(ValueCellBuilder().name("score").type(DataType.DOUBLE).build())
        schema.add(ValueCellBuilder().name("day").type(DataType.DATE).build())
        schema.add(ValueCellBuilder().name("seen").type(DataType.DATETIME).build())
        readings = Grid("readings", schema)
        # every column repeats at least one value
        for row in [
            (1, "north", 3, 9000000000, 0.5, 12.25, "Mar-01-2021", "Mar-01-2021 10:00:00"),
            (2, "south", 1, 5000000000, 0.25, 8.5, "Jan-15-2020", "Jan-15-2020 08:30:00"),
            (3, "north", 3, 9000000000, 0.5, 12.25, "Mar-01-2021", "Mar-01-2021 10:00:00"),
            (4, "east", 2, 7000000000, 0.75, 10.0, "Feb-10-2019", "Feb-10-2019 23:59:59"),
            (5, "south", 1, 5000000000, 0.25, 8.5, "Jan-15-2020", "Jan-15-2020 08:30:00"),
        ]:
            readings.new_row()
            for name, value in zip(readings.column_names(), row):
                readings.set_value_by_name(name, value)
            readings.add_row()
        return readings

    @pytest.mark.parametrize("order", [SortOrder.ASCENDING, SortOrder.DESCENDING])
    @pytest.mark.parametrize("column", ["site", "level", "bytes", "ratio", "score", "day", "seen"])
    def test_sort_is_idempotent(self, readings, column, order):
        once = readings.sort_by_column_name(column, order)
        twice = once.sort_by_column_name(column, order)
        assert once.get_rows() == twice.get_rows()

    @pytest.mark.parametrize("order", [SortOrder.ASCENDING, SortOrder.DESCENDING])
    @pytest.mark.parametrize("column", ["site", "level", "bytes", "ratio", "score", "day", "seen"])
    def test_ties_keep_insertion_order(self, readings, column, order):
        ids = [r.get_value_as_int("id") for r in readings.sort_by_column_name(column, order)]
        for first, second in [(1, 3), (2, 5)]:
            assert ids.index(first) < ids.index(second)

    def test_long_and_datetime_order(self, readings):
        ids = [r.get_value_as_int("id") for r in readings.sort_by_column_name("bytes")]
        assert ids == [2, 5, 4, 1, 3]
        ids = [r.get_value_as_int("id") for r in readings.sort_by_column_name("seen", SortOrder.DESCENDING)]
        assert ids == [1, 3, 2, 5, 4]

    def test_numeric_not_lexical(self, grid):
        _add(grid, 10, "Tim")
        ids = [r.get_value_as_int("id") for r in grid.sort_by_column_name("id")]
        assert ids == [1, 2, 3, 10]

    def test_dates(self, grid):
        names = [r.get_value_by_name("name") for r in grid.sort_by_column_name("joined")]
        assert names == ["Grace", "Ada", "Charles"]

    def test_descending(self, grid):
        names = [r.get_value_by_name("name")
                 for r in grid.sort_by_column_name("score", SortOrder.DESCENDING)]
        assert names == ["Ada", "Grace", "Charles"]

    def test_does_not_mutate(self, grid):
        before = grid.get_rows()
        grid.sort_by_column_name("name")
        assert grid.get_rows() == before

    def test_empty_values_first(self, grid):
        _add(grid, 5, "Unscored")
        first = grid.sort_by_column_name("score").get_row_as_record(0)
        assert first.get_value_by_name("name") == "Unscored"


# ---- Statistics ----


class TestStatistics:
    def test_numeric_column(self, grid):
        stats = grid.get_descriptive_statistics("score")
        assert stats.count == 3
        assert stats.minimum == 71.5
        assert stats.maximum == 98.0
        assert stats.total == pytest.approx(254.75)
        assert stats.mean == pytest.approx(254.75 / 3)
        assert stats.median == 85.25
        assert stats.std_dev == pytest.approx(13.2531, rel=1e-4)

    def test_empty_cells_skipped(self, grid):
        _add(grid, 5, "Unscored")
        assert grid.get_descriptive_statistics("score").count == 3

    def test_text_column(self, grid):
        stats = grid.get_descriptive_statistics("name")
        assert stats.count == 0
        assert math.isnan(stats.mean)

    def test_missing_column(self, grid):
        with pytest.raises(NotFoundError):
            grid.get_descriptive_statistics("missing")

    def test_dict_round_trip(self, grid):
        restored = Grid.from_dict(grid.to_dict())
        assert restored.get_rows() == grid.get_rows()
        assert restored.column_names() == grid.column_names()
