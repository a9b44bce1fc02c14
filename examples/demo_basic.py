"""
Basic recordkit Demo

Builds a small customer table, profiles it, links the customers in a
record graph and names everything with store keys.
"""

from recordkit import (
    Grid, KeyBuilder, NamingConfig, Record, RecordGraph, StoreField, StoreKey,
    ValueCellBuilder,
)
from recordkit.core import (
    DataType, GraphDataModel, GraphStructure, GridAnalyzer, RecordDiff, SortOrder,
)


def customer_schema():
    schema = Record("customer", "Customer")
    schema.add(ValueCellBuilder().name("id").type(DataType.INTEGER).is_primary().build())
    schema.add(ValueCellBuilder().name("name").type(DataType.TEXT).is_required().build())
    schema.add(ValueCellBuilder().name("city").type(DataType.TEXT).build())
    schema.add(ValueCellBuilder().name("balance").type(DataType.DOUBLE).build())
    return schema


def demo_grid():
    print("1. GRID OPERATIONS (Table-like)")
    print("-" * 70)

    customers = Grid("customers", customer_schema())
    for row_id, name, city, balance in [
        (1, "Alice", "NYC", 1250.0),
        (2, "Bob", "NYC", 310.5),
        (3, "Carol", "SF", 4200.75),
        (4, "Dave", "SF", 98.0),
    ]:
        customers.new_row()
        customers.set_value_by_name("id", row_id)
        customers.set_value_by_name("name", name)
        customers.set_value_by_name("city", city)
        customers.set_value_by_name("balance", balance)
        customers.add_row()

    print(f"   Rows: {customers.row_count()}, columns: {customers.column_names()}")

    by_balance = customers.sort_by_column_name("balance", SortOrder.DESCENDING)
    print("   Richest first:")
    for record in by_balance:
        print(f"     {record.get_value_by_name('name'):<8} {record.get_value_by_name('balance')}")

    stats = customers.get_descriptive_statistics("balance")
    print(f"   Balance mean={stats.mean:.2f} median={stats.median:.2f} std={stats.std_dev:.2f}")
    print()
    return customers


def demo_analysis(customers):
    print("2. COLUMN PROFILING")
    print("-" * 70)

    summary = GridAnalyzer(customers).analyze(sample_count=2)
    for record in summary:
        print(f"   {record.get_value_by_name('name'):<8} "
              f"type={record.get_value_by_name('type'):<8} "
              f"unique={record.get_value_by_name('unique_count')}")
    print()


def demo_diff(customers):
    print("3. RECORD DIFF")
    print("-" * 70)

    before = customers.get_row_as_record(0)
    after = before.copy()
    after.set_value_by_name("city", "Boston")
    after.remove("balance")

    diff = RecordDiff().compare(before, after)
    for record in diff.details:
        print(f"   {record.get_value_by_name('name'):<8} {record.get_value_by_name('status'):<8} "
              f"{record.get_value_by_name('description')}")
    print()


def demo_graph(customers):
    print("4. GRAPH OPERATIONS (Relationship traversal)")
    print("-" * 70)

    graph = RecordGraph.from_grid(customers)
    alice, bob, carol, dave = graph.vertices()

    referral = Record("referred")
    graph.add_edge_unique(alice, bob, referral)
    graph.add_edge_unique(alice, carol, referral.copy())
    graph.add_edge_unique(carol, dave, referral.copy())
    duplicate = graph.add_edge_unique(bob, alice, referral.copy())

    print(f"   Vertices: {graph.vertex_count()}, edges: {graph.edge_count()}")
    print(f"   Reverse duplicate rejected: {duplicate is None}")

    order = [vertex.get_value_by_name("name") for vertex in graph.breadth_first(alice)]
    print(f"   Breadth-first from Alice: {' -> '.join(order)}")

    edges = graph.get_edges_data_grid()
    print(f"   Edge grid columns: {edges.column_names()}")
    print()
    return graph


def demo_naming(customers, graph):
    print("5. STORE KEY NAMING")
    print("-" * 70)

    builder = KeyBuilder(NamingConfig("DEMO"))
    alice = customers.get_row_as_record(0)

    hash_key = builder.module_core().store_hash().data_object(alice).hash_id().build()
    primary_key = builder.module_json().store_json_document().data_object(alice).primary_id().build()
    graph_key = builder.module_graph().store_graph().data_object(graph).hash_id().build()

    for key in (hash_key, primary_key, graph_key):
        print(f"   {key}")

    skeleton = StoreKey.parse(hash_key.name).to_record()
    print(f"   Parsed skeleton: {skeleton.name}")

    balance = alice.get_item_by_name("balance")
    print(f"   Field name for balance: {StoreField.name_of(balance)}")
    print()


def main():
    print("=" * 70)
    print("RECORDKIT - RECORDS, GRIDS, GRAPHS AND STORE KEYS")
    print("=" * 70)
    print()

    customers = demo_grid()
    demo_analysis(customers)
    demo_diff(customers)
    graph = demo_graph(customers)
    demo_naming(customers, graph)

    print("=" * 70)
    print(f"Graph structure: {GraphStructure.DIRECTED_PSEUDOGRAPH.value}, "
          f"model: {GraphDataModel.DOC_DOC.value}")
    print("=" * 70)


if __name__ == "__main__":
    main()
