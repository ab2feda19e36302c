from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence

import networkx as nx

from ..errors import InfeasibleError
from .affinity import AffinityGraph, Weight

# Stand-in partner for whoever sits out an odd-sized round.
_UNMATCHED = object()


@dataclass(frozen=True)
class Matching:
    pairs: tuple[tuple[int, int], ...]
    leftover: int | None
    total_weight: Weight

    @property
    def matched_ids(self) -> set[int]:
        return {person_id for pair in self.pairs for person_id in pair}


def _integral_weights(graph: AffinityGraph, pairs: list[tuple[int, int]]) -> list[int]:
    # Fraction keeps float weights exact; scale everything to a common denominator.
    exact = [Fraction(graph.weight(*pair)) for pair in pairs]
    denominator = 1
    for value in exact:
        denominator = denominator * value.denominator // math.gcd(denominator, value.denominator)
    return [int(value * denominator) for value in exact]


def pair_preference(rank: int, pair_count: int) -> int:
    """Tie-break reward for the pair at ``rank`` in lexicographic order; earlier pairs earn more."""
    return (pair_count - rank) ** 2


def _checked_leftover_order(graph: AffinityGraph, leftover_order: Sequence[int] | None) -> list[int]:
    if leftover_order is None:
        return list(graph.vertices)
    order = [int(person_id) for person_id in leftover_order]
    if len(order) != len(graph) or set(order) != set(graph.vertices):
        raise ValueError("leftover_order must list every vertex exactly once")
    return order


def _solver_graph(graph: AffinityGraph, leftover_order: list[int]) -> nx.Graph:
    """Fold the three-level objective into one integer max-weight problem.

    Levels, most significant first: total affinity weight (minimized), which
    person sits out an odd round (the one latest in ``leftover_order``), and
    the summed ``pair_preference`` of the chosen pairs. Each level is scaled
    past the largest value the levels below it can reach, so all solver
    weights stay polynomial in size.
    """
    pairs = list(graph.pairs())
    n = len(graph)
    m = len(pairs)
    scaled = _integral_weights(graph, pairs)
    ceiling = max(scaled) + 1
    pair_scale = (n // 2) * m * m + 1
    leftover_scale = (n + 1) * pair_scale

    solver = nx.Graph()
    solver.add_nodes_from(graph.vertices)
    for rank, ((person_a, person_b), weight) in enumerate(zip(pairs, scaled)):
        solver.add_edge(
            person_a,
            person_b,
            weight=(ceiling - weight) * leftover_scale + pair_preference(rank, m),
        )

    if n % 2:
        # Every perfect matching uses exactly one of these edges, so the
        # ceiling term is a constant and only the position counts.
        solver.add_node(_UNMATCHED)
        for position, person_id in enumerate(leftover_order, start=1):
            solver.add_edge(person_id, _UNMATCHED, weight=ceiling * leftover_scale + position * pair_scale)
    return solver


def min_weight_matching(graph: AffinityGraph, leftover_order: Sequence[int] | None = None) -> Matching:
    """Minimum-weight near-perfect matching over a complete affinity graph.

    All but at most one vertex are paired. ``leftover_order`` ranks who
    should sit out when the pool is odd: among optimal matchings the person
    latest in the order is left out (default: the highest id). Remaining
    ties favor lexicographically earlier pairs; identical input always gives
    identical output.
    """
    n = len(graph)
    if n < 2:
        raise InfeasibleError(n)
    order = _checked_leftover_order(graph, leftover_order)

    mate = nx.max_weight_matching(_solver_graph(graph, order), maxcardinality=True)

    pairs: list[tuple[int, int]] = []
    leftover = None
    for edge in mate:
        if _UNMATCHED in edge:
            leftover = edge[0] if edge[1] is _UNMATCHED else edge[1]
        else:
            pairs.append(tuple(sorted(edge)))
    pairs.sort()
    if len(pairs) != n // 2 or (leftover is None) != (n % 2 == 0):
        raise InfeasibleError(n)

    total = sum(graph.weight(*pair) for pair in pairs)
    return Matching(pairs=tuple(pairs), leftover=leftover, total_weight=total)
