"""Tests for ValueCell, ValueCellBuilder and ValueRange."""

from datetime import datetime

import pytest

from recordkit.core.data import (
    DataType, FEATURE_IS_HIDDEN, FEATURE_IS_PRIMARY, FEATURE_IS_REQUIRED,
    FEATURE_IS_UPDATED, FEATURE_IS_VISIBLE, VALIDATION_MESSAGE_IS_REQUIRED,
    VALIDATION_MESSAGE_OUT_OF_RANGE,
)
from recordkit.core.item import ValueCell, ValueCellBuilder
from recordkit.core.range import ValueRange
from recordkit.exceptions import ValueConversionError


@pytest.fixture
def age():
    return ValueCellBuilder().name("age").type(DataType.INTEGER).title("Age").value(42).build()


# ---- Construction ----


class TestConstruction:
    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            ValueCell("")

    def test_visible_by_default(self):
        assert ValueCell("name").is_feature_true(FEATURE_IS_VISIBLE)

    def test_type_sets_default_format(self):
        cell = ValueCell("when", DataType.DATETIME)
        assert cell.data_format == "%b-%d-%Y %H:%M:%S"

    def test_from_object_infers_type(self):
        assert ValueCell.from_object("count", 3).type == DataType.INTEGER
        assert ValueCell.from_object("ratio", 0.5).type == DataType.DOUBLE
        assert ValueCell.from_object("flag", True).get_value() == "true"

    def test_from_object_expands_multi_value_text(self):
        cell = ValueCell.from_object("tags", "red|green")
        assert cell.values == ["red", "green"]
        assert cell.title == "Tags"


# ---- Values ----


class TestValues:
    def test_first_value_infers_type(self):
        cell = ValueCell("count")
        cell.set_value(7)
        assert cell.type == DataType.INTEGER
        assert cell.get_value() == "7"

    def test_text_value_on_undefined_becomes_text(self):
        cell = ValueCell("label")
        cell.set_value("x")
        assert cell.type == DataType.TEXT

    def test_empty_values_ignored(self):
        cell = ValueCell("label")
        cell.set_value(None)
        cell.set_value("")
        assert not cell.is_value_assigned()
        assert cell.type == DataType.UNDEFINED

    def test_updated_flag(self):
        cell = ValueCell("label")
        cell.set_value("x")
        assert cell.is_feature_true(FEATURE_IS_UPDATED)
        cell.clear_values()
        assert not cell.is_feature_assigned(FEATURE_IS_UPDATED)

    def test_multi_value_boundary(self):
        cell = ValueCell("tags", DataType.TEXT)
        assert not cell.is_multi_value()
        cell.add_value("a")
        assert not cell.is_multi_value()
        cell.add_value("b")
        assert cell.is_multi_value()
        assert cell.get_values_collapsed() == "a|b"

    def test_add_value_unique(self):
        cell = ValueCell("tags", DataType.TEXT)
        cell.add_value_unique("a")
        cell.add_value_unique("a")
        assert cell.values == ["a"]

    def test_default_value(self):
        cell = ValueCell("status", DataType.TEXT)
        cell.set_default_value("new")
        cell.assign_value_from_default()
        assert cell.get_value() == "new"


# ---- Typed getters ----


class TestTypedGetters:
    def test_int(self, age):
        assert age.get_value_as_int() == 42
        assert age.get_value_as_long() == 42

    def test_exponent(self):
        cell = ValueCell("big", DataType.LONG)
        cell.set_value("1.5E3")
        assert cell.get_value_as_int() == 1500

    def test_exponent_overflow_raises(self):
        cell = ValueCell("big", DataType.LONG)
        cell.set_value("1e400")
        with pytest.raises(ValueConversionError):
            cell.get_value_as_int()

    def test_empty_raises(self):
        with pytest.raises(ValueConversionError):
            ValueCell("age", DataType.INTEGER).get_value_as_int()

    def test_unparsable_raises(self):
        cell = ValueCell("age", DataType.INTEGER)
        cell.set_value("forty")
        with pytest.raises(ValueConversionError):
            cell.get_value_as_int()
        with pytest.raises(ValueConversionError):
            cell.get_value_as_float()

    def test_datetime_round_trip(self):
        moment = datetime(2020, 1, 2, 3, 4, 5)
        cell = ValueCell("when", DataType.DATETIME)
        cell.set_value(moment)
        assert cell.get_value() == "Jan-02-2020 03:04:05"
        assert cell.get_value_as_datetime() == moment

    def test_list_variants(self):
        cell = ValueCell("scores", DataType.INTEGER)
        cell.set_values([1, 2, 3])
        assert cell.get_values_as_int() == [1, 2, 3]
        assert cell.get_values_as_float() == [1.0, 2.0, 3.0]

    def test_value_as_object(self, age):
        assert age.get_value_as_object() == 42


# ---- Validation and identity ----


class TestValidation:
    def test_required(self):
        cell = ValueCellBuilder().name("email").is_required().build()
        assert cell.validate() == VALIDATION_MESSAGE_IS_REQUIRED
        cell.set_value("a@b.c")
        assert cell.is_valid()

    def test_hidden_is_skipped(self):
        cell = ValueCellBuilder().name("secret").is_required().is_hidden().build()
        assert cell.validate() is None

    def test_range(self):
        cell = ValueCellBuilder().name("age").type(DataType.INTEGER) \
            .range(ValueRange.of_numbers(0, 130)).value(131).build()
        assert cell.validate() == VALIDATION_MESSAGE_OUT_OF_RANGE
        cell.set_value(30)
        assert cell.is_valid()

    def test_overflowing_value_is_out_of_range(self):
        cell = ValueCell("big", DataType.LONG)
        cell.set_range(ValueRange.of_numbers(0, 10))
        cell.set_value("1e400")
        assert cell.validate() == VALIDATION_MESSAGE_OUT_OF_RANGE

    def test_text_range(self):
        cell = ValueCellBuilder().name("color").range(ValueRange.of_text("red", "blue")).value("red").build()
        assert cell.is_valid()
        cell.set_value("green")
        assert not cell.is_valid()

    def test_hash_stable_across_copy(self, age):
        assert age.hash_id() == age.copy().hash_id()

    def test_hash_escapes_delimiter(self):
        joined = ValueCellBuilder().name("tags").values("a|b").build()
        split = ValueCellBuilder().name("tags").values("a", "b").build()
        assert joined != split
        assert joined.hash_id() != split.hash_id()

    def test_hash_changes_with_value(self, age):
        other = age.copy()
        other.set_value(43)
        assert age.hash_id() != other.hash_id()

    def test_equality_ignores_features(self, age):
        other = age.copy()
        other.enable_feature(FEATURE_IS_PRIMARY)
        assert other == age
        assert hash(other) == hash(age)

    def test_dict_round_trip(self, age):
        restored = ValueCell.from_dict(age.to_dict())
        assert restored.is_equal(age)
        assert restored.title == "Age"


# ---- Builder ----


class TestBuilder:
    def test_flags(self):
        cell = ValueCellBuilder().name("id").is_primary().is_visible(False).build()
        assert cell.is_feature_true(FEATURE_IS_PRIMARY)
        assert not cell.is_feature_assigned(FEATURE_IS_VISIBLE)

    def test_required_flag(self):
        assert ValueCellBuilder().name("x").is_required().build().is_feature_true(FEATURE_IS_REQUIRED)

    def test_missing_name(self):
        with pytest.raises(ValueError):
            ValueCellBuilder().build()

    def test_analyze_integer(self):
        assert ValueCellBuilder().name("n").analyze("12").build().type == DataType.INTEGER

    def test_analyze_double(self):
        assert ValueCellBuilder().name("n").analyze("3.5").build().type == DataType.DOUBLE

    def test_analyze_date(self):
        cell = ValueCellBuilder().name("d").analyze("Jan-02-2020").build()
        assert cell.type == DataType.DATETIME
        assert cell.data_format == "%b-%d-%Y"

    def test_analyze_text(self):
        assert ValueCellBuilder().name("t").analyze("hello").build().type == DataType.TEXT

    def test_hidden_flag(self):
        assert ValueCellBuilder().name("x").is_hidden().build().is_feature_true(FEATURE_IS_HIDDEN)


# ---- Range ----


class TestValueRange:
    def test_exclusive_bounds(self):
        ages = ValueRange.of_numbers(0, 130)
        assert ages.is_valid(1)
        assert not ages.is_valid(130)
        assert not ages.is_valid(0)

    def test_inclusive_bounds(self):
        assert ValueRange.of_numbers(0, 130, inclusive=True).is_valid(130)

    def test_inverted_bounds(self):
        with pytest.raises(ValueError):
            ValueRange.of_numbers(5, 1)

    def test_dates(self):
        window = ValueRange.of_dates(datetime(2020, 1, 1), datetime(2020, 12, 31))
        assert window.is_valid(datetime(2020, 6, 1))
        assert not window.is_valid(datetime(2021, 6, 1))

    def test_equality_and_copy(self):
        colors = ValueRange.of_text("red", "green")
        assert colors.copy().is_equal(colors)
        assert colors.min_max_string() == "red, green"
