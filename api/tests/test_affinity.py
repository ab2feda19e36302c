import pytest

from matcher.errors import EmptyPoolError
from matcher.services.affinity import AffinityGraph, canonical_pair, reinforced_weights


def test_canonical_pair_orders_ids_and_rejects_self_pairs():
    assert canonical_pair(7, 3) == (3, 7)
    assert canonical_pair(3, 7) == (3, 7)
    with pytest.raises(ValueError):
        canonical_pair(4, 4)


def test_missing_edges_default_to_zero_and_lookup_is_symmetric():
    graph = AffinityGraph.build([3, 1, 2], [(1, 2, 5)])
    assert graph.vertices == (1, 2, 3)
    assert graph.weight(1, 2) == 5
    assert graph.weight(2, 1) == 5
    assert graph.weight(1, 3) == 0
    assert graph.weight(3, 2) == 0


def test_build_accepts_store_rows_and_ignores_edges_outside_the_pool():
    rows = [
        {"person_a_id": 1, "person_b_id": 2, "weight": 4},
        {"person_a_id": 2, "person_b_id": 9, "weight": 8},
    ]
    graph = AffinityGraph.build([1, 2, 3], rows)
    assert graph.stored_edges() == {(1, 2): 4}
    with pytest.raises(KeyError):
        graph.weight(2, 9)


@pytest.mark.parametrize("vertices", [[], [1], [5, 5]])
def test_build_requires_two_distinct_people(vertices):
    with pytest.raises(EmptyPoolError):
        AffinityGraph.build(vertices)


def test_build_rejects_duplicate_or_invalid_edges():
    with pytest.raises(ValueError):
        AffinityGraph.build([1, 2], [(1, 2, 1), (2, 1, 3)])
    with pytest.raises(ValueError):
        AffinityGraph.build([1, 2], [(1, 2, -1)])
    with pytest.raises(ValueError):
        AffinityGraph.build([1, 2], [(1, 2, float("nan"))])


def test_graph_is_read_only():
    graph = AffinityGraph.build([1, 2], [(1, 2, 1)])
    with pytest.raises(TypeError):
        graph._weights[(1, 2)] = 10
    with pytest.raises(AttributeError):
        graph.vertices = (1,)


def test_pairs_walk_in_lexicographic_order():
    graph = AffinityGraph.build([4, 2, 1, 3])
    assert list(graph.pairs()) == [(1, 2), (1, 3), (1, 4), (2, 3), (2, 4), (3, 4)]


def test_reinforced_weights_only_touch_matched_pairs():
    graph = AffinityGraph.build([1, 2, 3, 4], [(1, 2, 2), (3, 4, 0), (1, 3, 7)])
    updated = reinforced_weights(graph, [(2, 1), (3, 4)], increment=1)
    assert updated == {(1, 2): 3, (3, 4): 1}


def test_reinforced_weights_rejects_repeated_pair():
    graph = AffinityGraph.build([1, 2])
    with pytest.raises(ValueError):
        reinforced_weights(graph, [(1, 2), (2, 1)])
