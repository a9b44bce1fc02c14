"""Tests for store key and field naming."""

import pytest

from recordkit.config import NamingConfig
from recordkit.core.data import DataType, FEATURE_IS_MULTIVALUE, FEATURE_IS_SECRET, GraphStructure
from recordkit.core.graph import RecordGraph
from recordkit.core.grid import Grid
from recordkit.core.hashing import ContentDigest
from recordkit.core.item import ValueCellBuilder
from recordkit.core.record import Record
from recordkit.exceptions import HashUnavailableError, MalformedKeyError
from recordkit.naming import (
    DataObject, IdMethod, KeyBuilder, StoreField, StoreKey, StoreModule, StoreType,
    search_prefix,
)
from recordkit.naming.codes import FEATURE_IS_KEY, FEATURE_KEY_NAME


@pytest.fixture
def config():
    return NamingConfig("APP")


@pytest.fixture
def customer():
    record = Record("customer")
    record.add(ValueCellBuilder().name("id").type(DataType.INTEGER).is_primary().value(42).build())
    record.add(ValueCellBuilder().name("name").value("Ada").build())
    return record


# ---- Building keys ----


class TestKeyBuilder:
    def test_hash_key(self, config, customer):
        key = KeyBuilder(config).module_core().store_hash().data_object(customer).hash_id().build()
        assert key.name == f"APP:RC:HA:DD:MH:customer:{customer.generate_unique_hash(False)}"
        assert str(key) == key.name

    def test_name_only_key(self, config, customer):
        key = KeyBuilder(config).module_json().store_json_document().data_object(customer).build()
        assert key.name == "APP:RJ:JD:DD:MN:customer"
        assert key.id == ""

    def test_hash_follows_payload_at_build(self, config, customer):
        builder = KeyBuilder(config).module_core().store_hash().data_object(customer).hash_id()
        first = builder.build()
        customer.set_value_by_name("name", "Grace")
        assert builder.build().id != first.id

    def test_primary_id_from_record(self, config, customer):
        key = KeyBuilder(config).module_core().store_hash().data_object(customer).primary_id().build()
        assert key.method == IdMethod.PRIMARY
        assert key.id == "42"

    def test_explicit_primary_id(self, config, customer):
        key = KeyBuilder(config).module_core().data_object(customer).primary_id("C-7").build()
        assert key.name == "APP:RC::DD:MP:customer:C-7"

    def test_primary_falls_back_to_random(self, config):
        key = KeyBuilder(config).module_core().data_object(Record("loose")).primary_id().build()
        assert key.method == IdMethod.RANDOM
        assert len(key.id) == 36

    def test_random_ids_differ(self, config, customer):
        builder = KeyBuilder(config).module_core().data_object(customer).random_id()
        assert builder.build().id != builder.build().id

    def test_value_cell_key(self, config):
        tags = ValueCellBuilder().name("tags").values("red", "blue").is_secret().build()
        key = KeyBuilder(config).module_core().store_set().data_object(tags).build()
        assert key.name == "APP:RC:SE:DI:MN:tags:TE:M:E"

    def test_grid_and_graph_objects(self, config):
        grid_key = KeyBuilder(config).module_search().store_search_index().data_object(Grid("orders")).build()
        assert grid_key.data_object == DataObject.GRID
        graph = RecordGraph("network", GraphStructure.MULTI_GRAPH)
        graph_key = KeyBuilder(config).module_graph().store_graph().data_object(graph).hash_id().build()
        assert graph_key.name == f"APP:RG:GP:DG:MH:network:{graph.hash_id()}"

    def test_module_starts_new_key(self, config, customer):
        builder = KeyBuilder(config).module_core().store_hash().data_object(customer)
        key = builder.module_json().data_name("order").build()
        assert key.store_type is None
        assert key.data_object == DataObject.DOCUMENT

    def test_unsupported_object(self, config):
        with pytest.raises(TypeError):
            KeyBuilder(config).data_object("customer")

    def test_empty_name(self, config):
        with pytest.raises(MalformedKeyError):
            KeyBuilder(config).module_core().build()

    def test_delimiter_in_name(self, config):
        with pytest.raises(MalformedKeyError):
            KeyBuilder(config).module_core().data_name("bad:name").build()
        with pytest.raises(MalformedKeyError):
            KeyBuilder(config).module_core().data_name("order").primary_id("a:b").build()

    def test_hash_unavailable(self, config, customer, monkeypatch):
        def unavailable(include_features=False):
            raise HashUnavailableError("no digest")

        monkeypatch.setattr(customer, "generate_unique_hash", unavailable)
        builder = KeyBuilder(config).module_core().data_object(customer)
        with pytest.raises(HashUnavailableError):
            builder.hash_id().build()
        key = builder.hash_id(fallback_random=True).build()
        assert key.method == IdMethod.RANDOM

    def test_unknown_digest_algorithm(self):
        with pytest.raises(HashUnavailableError):
            ContentDigest("no-such-digest")


# ---- Parsing keys ----


class TestParse:
    def test_hash_round_trip(self, config, customer):
        key = KeyBuilder(config).module_core().store_hash().data_object(customer).hash_id().build()
        parsed = StoreKey.parse(key.name)
        assert parsed.method == IdMethod.HASH
        assert parsed.data_name == "customer"
        assert parsed.id == key.id
        assert parsed.prefix == "APP"
        assert parsed.name == key.name

    def test_item_round_trip(self, config):
        age = ValueCellBuilder().name("age").type(DataType.INTEGER).value(31).build()
        key = KeyBuilder(config).module_core().store_string().data_object(age).hash_id().build()
        parsed = StoreKey.parse(key.name)
        assert parsed.data_type == DataType.INTEGER
        assert not parsed.multi_value
        assert not parsed.secret
        assert parsed.name == key.name

    def test_module_codes(self):
        parsed = StoreKey.parse("APP:RS:SI:DT:MN:orders")
        assert parsed.module == StoreModule.SEARCH
        assert parsed.store_type == StoreType.SEARCH_INDEX
        assert parsed.data_object == DataObject.GRID

    @pytest.mark.parametrize("text", [
        "APP:RC:HA:DD",
        "APP:RC:XX:DD:MN:customer",
        "APP:RC:HA:ZZ:MN:customer",
        ":RC:HA:DD:MN:customer",
        "APP:RC:HA:DD::customer",
        "APP:RC:SG:DI:MN:age:IN",
    ])
    def test_malformed(self, text):
        with pytest.raises(MalformedKeyError):
            StoreKey.parse(text)

    def test_custom_delimiter(self):
        config = NamingConfig("APP", "|")
        parsed = StoreKey.parse("APP|RC|HA|DD|MN|customer", config)
        assert parsed.name == "APP|RC|HA|DD|MN|customer"


# ---- Skeletons ----


class TestSkeletons:
    def test_record_skeleton(self, config, customer):
        key = KeyBuilder(config).module_core().store_hash().data_object(customer).hash_id().build()
        record = StoreKey.parse(key.name).to_record()
        assert record.name == "customer"
        assert record.count() == 0
        assert record.get_feature(FEATURE_KEY_NAME) == key.name

    def test_value_cell_skeleton(self, config):
        tags = ValueCellBuilder().name("tags").values("red", "blue").is_secret().build()
        key = KeyBuilder(config).module_core().store_set().data_object(tags).build()
        cell = StoreKey.parse(key.name).to_value_cell()
        assert cell.name == "tags"
        assert cell.type == DataType.TEXT
        assert cell.is_feature_true(FEATURE_IS_MULTIVALUE)
        assert cell.is_feature_true(FEATURE_IS_SECRET)
        assert not cell.is_value_assigned()

    def test_grid_and_graph_skeletons(self):
        assert StoreKey.parse("APP:RC:HA:DT:MN:orders").to_grid().name == "orders"
        assert StoreKey.parse("APP:RG:GP:DG:MN:network").to_graph().name == "network"

    def test_mismatched_kind(self):
        parsed = StoreKey.parse("APP:RC:HA:DD:MN:customer")
        assert parsed.to_value_cell() is None
        assert parsed.to_grid() is None
        assert parsed.to_graph() is None
        assert StoreKey.parse("APP:RC:HA:DT:MN:orders").to_record() is None


# ---- Search prefixes ----


class TestSearchPrefix:
    def test_json_documents(self, config):
        assert search_prefix(StoreModule.JSON, config) == "APP:RJ:JD:"

    def test_hashes(self, config):
        assert search_prefix(StoreModule.CORE, config) == "APP:RC:HA:"

    def test_default_prefix(self):
        assert search_prefix(StoreModule.CORE) == "ASRC:RC:HA:"


# ---- Field names ----


class TestStoreField:
    def test_name_of(self):
        age = ValueCellBuilder().name("age").type(DataType.INTEGER).value(31).build()
        assert StoreField.name_of(age) == "age:IN:S:P"

    def test_flags(self):
        tags = ValueCellBuilder().name("tags").values("red", "blue").is_secret().build()
        assert StoreField.name_of(tags) == "tags:TE:M:E"

    def test_delimiter_stripped(self):
        cell = ValueCellBuilder().name("a:b").type(DataType.TEXT).build()
        assert StoreField.name_of(cell) == "ab:TE:S:P"

    def test_key_field(self):
        ref = ValueCellBuilder().name("owner").build()
        ref.enable_feature(FEATURE_IS_KEY)
        assert StoreField.name_of(ref) == "owner:KE:S:P"
        parsed = StoreField.parse("owner:KE:S:P")
        assert parsed.is_key
        assert parsed.data_type == DataType.TEXT
        assert parsed.to_value_cell().is_feature_true(FEATURE_IS_KEY)

    def test_parse(self):
        parsed = StoreField.parse("score:DO:M:E")
        assert parsed.item_name == "score"
        assert parsed.data_type == DataType.DOUBLE
        assert parsed.multi_value
        assert parsed.secret
        assert parsed.name == "score:DO:M:E"

    def test_plain_name(self):
        parsed = StoreField.parse("legacy_field")
        assert not parsed.encoded
        assert parsed.name == "legacy_field"
        assert parsed.to_value_cell().type == DataType.TEXT

    def test_unknown_type_code_reads_as_text(self):
        assert StoreField.parse("x:ZZ:S:P").data_type == DataType.TEXT
