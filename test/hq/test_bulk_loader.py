import pytest

from grafnote.db.conn import QueryExecutionError
from grafnote.hq.bulk_loader import BulkLoader, pairs
from grafnote.hq.ids import IDAllocator


@pytest.fixture(scope="function")
def nodes_file(tmp_path):
    path = tmp_path / "nodes.csv"
    path.write_text("10,Person,name,Eve,age,22\n11,Place,name,Rome\n12,Person\n")
    return path


@pytest.fixture(scope="function")
def relationships_file(tmp_path):
    path = tmp_path / "relationships.csv"
    path.write_text("10,11,LIVES_IN,from,2001\n10,11\n11,10,VISITED\n")
    return path


def test_pairs_drops_unpaired_key():
    assert pairs(["name", "Eve", "age"]) == {"name": "Eve"}
    assert pairs([]) == {}


def test_load_nodes(store, nodes_file):
    allocator = IDAllocator()
    report = BulkLoader(store, allocator).load_nodes(nodes_file)
    assert (report.created, report.skipped) == (2, 1)
    assert store.query_names == ["create_node", "create_node"]
    assert store.queries[0].params == {"props": {"ID": "10", "name": "Eve", "age": "22"}}
    assert store.queries[1].identifiers == {"node_type": "Place"}
    assert allocator.allocate() == "12"


def test_load_relationships(store, nodes_file, relationships_file):
    loader = BulkLoader(store)
    loader.load_nodes(nodes_file)
    report = loader.load_relationships(relationships_file)
    assert (report.created, report.skipped) == (2, 1)
    assert [(r["source"], r["target"], r["type"], r["props"]) for r in store.relationships] == [
        ("10", "11", "LIVES_IN", {"from": "2001"}),
        ("11", "10", "VISITED", {}),
    ]
    assert len(report.messages) == 2


def test_missing_file(store, tmp_path):
    with pytest.raises(FileNotFoundError):
        BulkLoader(store).load_nodes(tmp_path / "absent.csv")


def test_failure_stops_the_load(store, nodes_file):
    store.fail_on.add("create_node")
    with pytest.raises(QueryExecutionError):
        BulkLoader(store).load_nodes(nodes_file)
    assert store.nodes == {}


def test_quote_characters_are_values(store, tmp_path):
    path = tmp_path / "quoted.csv"
    path.write_text('1,Person,name,"Bob\n2,Person,name,O"Brien\n')
    report = BulkLoader(store).load_nodes(path)
    assert report.created == 2
    assert store.queries[0].params == {"props": {"ID": "1", "name": '"Bob'}}
    assert store.queries[1].params == {"props": {"ID": "2", "name": 'O"Brien'}}
