"""Tests for column profiling and schema conversion."""

import pytest

from recordkit.core.analyzer import GridAnalyzer, ItemAnalyzer
from recordkit.core.data import DataType, FEATURE_IS_PRIMARY, FEATURE_IS_VISIBLE
from recordkit.core.grid import Grid
from recordkit.core.item import ValueCellBuilder
from recordkit.core.record import Record
from recordkit.core.schema import ITEM_NAME, ITEM_TYPE, grid_to_schema, schema_to_grid


@pytest.fixture
def grid():
    schema = Record("people")
    schema.add(ValueCellBuilder().name("id").type(DataType.INTEGER).build())
    schema.add(ValueCellBuilder().name("name").type(DataType.TEXT).build())
    schema.add(ValueCellBuilder().name("score").type(DataType.DOUBLE).build())
    people = Grid("people", schema)
    for row_id, name, score in [(1, "Ada", "98.5"), (2, "Grace", "85.25"), (3, "Ada", "")]:
        people.new_row()
        people.set_value_by_name("id", row_id)
        people.set_value_by_name("name", name)
        people.set_value_by_name("score", score)
        people.add_row()
    return people


# ---- ItemAnalyzer ----


class TestItemAnalyzer:
    def test_integer_column(self):
        analyzer = ItemAnalyzer("age")
        for value in ["31", "47", "", "31"]:
            analyzer.scan(value)
        assert analyzer.type == DataType.INTEGER
        assert analyzer.null_count == 1
        assert analyzer.unique_count == 2
        assert analyzer.top_values(1) == [("31", 2, 50.0)]

    def test_float_column(self):
        analyzer = ItemAnalyzer("ratio")
        for value in ["1", "2.5"]:
            analyzer.scan(value)
        assert analyzer.type == DataType.FLOAT

    def test_boolean_column(self):
        analyzer = ItemAnalyzer("active")
        for value in ["yes", "No", "true"]:
            analyzer.scan(value)
        assert analyzer.type == DataType.BOOLEAN

    def test_date_column(self):
        analyzer = ItemAnalyzer("joined")
        for value in ["Jan-02-2020", "2021-03-04"]:
            analyzer.scan(value)
        assert analyzer.type == DataType.DATETIME

    def test_text_column(self):
        analyzer = ItemAnalyzer("name")
        analyzer.scan("hello")
        analyzer.scan("12")
        assert analyzer.type == DataType.TEXT

    def test_declared_type_wins(self):
        analyzer = ItemAnalyzer("code", DataType.TEXT)
        analyzer.scan("12")
        assert analyzer.type == DataType.TEXT

    def test_declared_number_with_text_values(self):
        analyzer = ItemAnalyzer("count", DataType.INTEGER)
        for value in ["abc", "7", "12"]:
            analyzer.scan(value)
        details = analyzer.details()
        assert details.get_value_by_name("minimum") == "7.00"
        assert details.get_value_by_name("maximum") == "12.00"

    def test_declared_number_without_numbers(self):
        analyzer = ItemAnalyzer("count", DataType.INTEGER)
        analyzer.scan("abc")
        details = analyzer.details()
        assert details.get_value_by_name("minimum") == ""
        assert "mean" not in details

    def test_details(self):
        analyzer = ItemAnalyzer("age")
        for value in ["31", "47", "", "31"]:
            analyzer.scan(value)
        details = analyzer.details(sample_count=2)
        assert details.get_value_by_name("type") == "Integer"
        assert details.get_value_as_int("total_count") == 4
        assert details.get_value_by_name("minimum") == "31.00"
        assert details.get_value_by_name("maximum") == "47.00"
        assert details.get_value_by_name("mean") == "36.33"
        assert details.get_value_by_name("standard_deviation") == "9.24"
        assert details.get_value_by_name("value_01") == "31"
        assert details.get_value_as_int("count_02") == 1


# ---- GridAnalyzer ----


class TestGridAnalyzer:
    def test_one_row_per_column(self, grid):
        summary = GridAnalyzer(grid).analyze(sample_count=1)
        assert summary.name == "people Analysis"
        assert summary.row_count() == 3
        names = [record.get_value_by_name("name") for record in summary]
        assert names == ["id", "name", "score"]

    def test_inferred_types(self, grid):
        summary = GridAnalyzer(grid).analyze()
        types = {record.get_value_by_name("name"): record.get_value_by_name("type")
                 for record in summary}
        assert types == {"id": "Integer", "name": "Text", "score": "Float"}

    def test_null_counts(self, grid):
        analyzers = GridAnalyzer(grid).scan()
        assert analyzers["score"].null_count == 1
        assert analyzers["name"].unique_count == 2


# ---- Schema conversion ----


class TestSchemaConversion:
    @pytest.fixture
    def schema(self):
        record = Record("people")
        record.add(ValueCellBuilder().name("id").title("Id").type(DataType.INTEGER).is_primary().build())
        name = ValueCellBuilder().name("name").title("Name").type(DataType.TEXT).build()
        name.add_feature("maxLength", "40")
        record.add(name)
        return record

    def test_one_row_per_cell(self, schema):
        grid = schema_to_grid(schema)
        assert grid.name == "people Schema"
        assert grid.row_count() == 2
        assert grid.get_row_as_record(0).get_value_by_name(ITEM_NAME) == "id"
        assert grid.get_row_as_record(0).get_value_by_name(ITEM_TYPE) == "Integer"

    def test_extended_adds_custom_features(self, schema):
        grid = schema_to_grid(schema, extended=True)
        assert "maxLength" in grid.columns
        assert grid.columns.get_item_by_name("maxLength").type == DataType.INTEGER
        assert "maxLength" not in schema_to_grid(schema).columns

    def test_round_trip(self, schema):
        rebuilt = grid_to_schema(schema_to_grid(schema, extended=True))
        assert rebuilt.item_names() == ["id", "name"]
        assert rebuilt.get_item_by_name("id").type == DataType.INTEGER
        assert rebuilt.get_item_by_name("id").is_feature_true(FEATURE_IS_PRIMARY)
        assert rebuilt.get_item_by_name("name").is_feature_true(FEATURE_IS_VISIBLE)
        assert rebuilt.get_item_by_name("name").get_feature("maxLength") == "40"

    def test_rows_without_title_are_skipped(self):
        record = Record("loose")
        record.add(ValueCellBuilder().name("untitled").type(DataType.TEXT).build())
        assert grid_to_schema(schema_to_grid(record)).count() == 0
