from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Union

from ..errors import EmptyPoolError

Weight = Union[int, float]


def canonical_pair(person_a: int, person_b: int) -> tuple[int, int]:
    if person_a == person_b:
        raise ValueError(f"Self pair is not allowed: {person_a}")
    return (person_a, person_b) if person_a < person_b else (person_b, person_a)


def _check_weight(pair: tuple[int, int], weight: Any) -> Weight:
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        raise ValueError(f"Edge {pair} has non-numeric weight {weight!r}")
    if isinstance(weight, float) and not math.isfinite(weight):
        raise ValueError(f"Edge {pair} has non-finite weight {weight!r}")
    if weight < 0:
        raise ValueError(f"Edge {pair} has negative weight {weight!r}")
    return weight


def _edge_triplet(edge: Any) -> tuple[int, int, Any]:
    if isinstance(edge, Mapping):
        return int(edge["person_a_id"]), int(edge["person_b_id"]), edge["weight"]
    person_a, person_b, weight = edge
    return int(person_a), int(person_b), weight


@dataclass(frozen=True)
class AffinityGraph:
    """Complete weighted graph over one round's waiting participants.

    Pairs without a stored edge weigh 0. Built once per trigger and thrown
    away after the matching is computed.
    """

    vertices: tuple[int, ...]
    _weights: Mapping[tuple[int, int], Weight] = field(repr=False)

    @classmethod
    def build(cls, vertices: Iterable[int], edges: Iterable[Any] = ()) -> "AffinityGraph":
        ids = tuple(sorted({int(v) for v in vertices}))
        if len(ids) < 2:
            raise EmptyPoolError(len(ids))

        members = set(ids)
        weights: dict[tuple[int, int], Weight] = {}
        for edge in edges:
            person_a, person_b, weight = _edge_triplet(edge)
            pair = canonical_pair(person_a, person_b)
            if pair[0] not in members or pair[1] not in members:
                continue
            if pair in weights:
                raise ValueError(f"Duplicate edge for pair {pair}")
            weights[pair] = _check_weight(pair, weight)
        return cls(vertices=ids, _weights=MappingProxyType(weights))

    def __len__(self) -> int:
        return len(self.vertices)

    def __contains__(self, person_id: object) -> bool:
        return person_id in self.vertices

    def weight(self, person_a: int, person_b: int) -> Weight:
        pair = canonical_pair(person_a, person_b)
        if pair[0] not in self or pair[1] not in self:
            raise KeyError(pair)
        return self._weights.get(pair, 0)

    def pairs(self) -> Iterable[tuple[int, int]]:
        # vertices are sorted, so this walks pairs in lexicographic order
        for i, person_a in enumerate(self.vertices):
            for person_b in self.vertices[i + 1:]:
                yield person_a, person_b

    def stored_edges(self) -> dict[tuple[int, int], Weight]:
        return dict(self._weights)


def reinforced_weights(
    graph: AffinityGraph,
    pairs: Iterable[tuple[int, int]],
    increment: int = 1,
) -> dict[tuple[int, int], Weight]:
    """New edge weights after a round: every matched pair gains ``increment``.

    Pairs that were not matched keep their weight and are left out.
    """
    if increment < 0:
        raise ValueError("increment must be non-negative")
    updated: dict[tuple[int, int], Weight] = {}
    for person_a, person_b in pairs:
        pair = canonical_pair(person_a, person_b)
        if pair in updated:
            raise ValueError(f"Pair {pair} matched twice in one round")
        updated[pair] = graph.weight(*pair) + increment
    return updated
