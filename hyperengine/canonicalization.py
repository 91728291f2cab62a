"""Canonical forms of hypergraphs given as edge lists."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Hashable, Iterable, Sequence

_MASK = (1 << 64) - 1
_GOLDEN = 0x9E3779B9


def _combine(seed: int, value: int) -> int:
    return (seed ^ ((value + _GOLDEN + (seed << 6) + (seed >> 2)) & _MASK)) & _MASK


@dataclass(frozen=True)
class CanonicalForm:
    """Edges relabelled onto 0..n-1; equal forms mean isomorphic hypergraphs."""

    edges: tuple[tuple[int, ...], ...] = ()
    vertex_count: int = 0

    def __str__(self) -> str:
        body = ",".join("{" + ",".join(map(str, edge)) + "}" for edge in self.edges)
        return f"{{{body}}} ({self.vertex_count} vertices)"

    def __hash__(self) -> int:
        value = self.vertex_count & _MASK
        for edge in self.edges:
            edge_hash = len(edge)
            for vertex in edge:
                edge_hash = _combine(edge_hash, vertex & _MASK)
            value = _combine(value, edge_hash)
        return value


@dataclass
class VertexMapping:
    """Correspondence between original vertices and canonical indices."""

    original_to_canonical: dict[Hashable, int] = field(default_factory=dict)
    canonical_to_original: list[Hashable] = field(default_factory=list)

    def map_vertex(self, original: Hashable) -> int | None:
        """Canonical index of ``original``, or None if it is not a vertex."""
        return self.original_to_canonical.get(original)

    def original(self, canonical: int) -> Hashable | None:
        """Original vertex at canonical index ``canonical``, or None if out of range."""
        if 0 <= canonical < len(self.canonical_to_original):
            return self.canonical_to_original[canonical]
        return None


@dataclass
class CanonicalizationResult:
    canonical_form: CanonicalForm
    vertex_mapping: VertexMapping

    @staticmethod
    def are_isomorphic(a: CanonicalizationResult, b: CanonicalizationResult) -> bool:
        """Whether two results describe isomorphic hypergraphs."""
        return a.canonical_form == b.canonical_form


class Canonicalizer:
    """Finds the lexicographically smallest relabelling of a hypergraph.

    Every ordering of the vertices is tried; vertex i of the ordering becomes
    label i, the relabelled edges are sorted, and the smallest edge list wins.
    The cost grows factorially with the number of vertices.
    """

    def canonicalize_edges(
        self, edges: Iterable[Sequence[Hashable]]
    ) -> CanonicalizationResult:
        """Canonicalize a hypergraph given as a list of vertex sequences."""
        edge_list = [tuple(edge) for edge in edges]
        vertices = sorted({v for edge in edge_list for v in edge})
        if not edge_list:
            return CanonicalizationResult(CanonicalForm(), VertexMapping())

        best_edges: list[tuple[int, ...]] | None = None
        best_order: tuple[Hashable, ...] = ()
        for order in itertools.permutations(vertices):
            labels = {vertex: index for index, vertex in enumerate(order)}
            candidate = sorted(tuple(labels[v] for v in edge) for edge in edge_list)
            if best_edges is None or candidate < best_edges:
                best_edges = candidate
                best_order = order

        mapping = VertexMapping(
            original_to_canonical={v: i for i, v in enumerate(best_order)},
            canonical_to_original=list(best_order),
        )
        form = CanonicalForm(edges=tuple(best_edges or ()), vertex_count=len(vertices))
        return CanonicalizationResult(form, mapping)

    def are_isomorphic(
        self, a: Iterable[Sequence[Hashable]], b: Iterable[Sequence[Hashable]]
    ) -> bool:
        """Whether two edge lists have the same canonical form."""
        return (
            self.canonicalize_edges(a).canonical_form
            == self.canonicalize_edges(b).canonical_form
        )