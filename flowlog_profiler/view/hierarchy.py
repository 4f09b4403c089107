"""
Hierarchy Resolver.

Collapses the multi-parent DAG into one canonical spanning tree for the
drill-down view. Each node keeps the lexicographically smallest of its DAG
parents as its primary parent; every other DAG parent is an extra parent that
is displayed but never followed when building tree children.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, TypeVar

from flowlog_profiler.diagnostics import PRIMARY_CYCLE_BROKEN, Diagnostics

logger = logging.getLogger(__name__)

T = TypeVar("T")


def normalize_parents(parents: Iterable[T]) -> list[T]:
    """Sort ascending and drop duplicates."""
    return sorted(set(parents))


@dataclass(frozen=True)
class Hierarchy:
    """Spanning tree embedded in the DAG plus extra-parent metadata."""

    primary_parent: dict[str, str | None]
    dag_parents: dict[str, list[str]]
    extra_parents: dict[str, list[str]]
    children: dict[str, list[str]]
    roots: list[str]

    def children_of(self, name: str) -> list[str]:
        return self.children.get(name, [])

    def ancestors(self, name: str) -> list[str]:
        """Primary-parent chain from the node's parent up to its root."""
        out = []
        cur = self.primary_parent.get(name)
        while cur is not None and cur not in out:
            out.append(cur)
            cur = self.primary_parent.get(cur)
        return out


class HierarchyResolver:
    """Resolves a deterministic spanning tree from DAG parent lists."""

    def __init__(self, diagnostics: Diagnostics | None = None):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def resolve(
        self,
        names: Iterable[str],
        parents: Mapping[str, Iterable[str]],
        roots: Iterable[str] = (),
    ) -> Hierarchy:
        """
        Resolve the spanning tree.

        Args:
            names: Every node name
            parents: Node name -> DAG parents, in any order, possibly repeated
            roots: Externally declared roots, merged into the root set
        """
        names = sorted(set(names))

        dag_parents: dict[str, list[str]] = {}
        primary: dict[str, str | None] = {}
        for name in names:
            normalized = normalize_parents(parents.get(name, ()))
            dag_parents[name] = normalized
            primary[name] = normalized[0] if normalized else None

        self._break_primary_cycles(names, primary)

        extra_parents = {
            name: [p for p in dag_parents[name] if p != primary[name]]
            for name in names
        }

        children: dict[str, list[str]] = {}
        for name in names:
            p = primary[name]
            if p is not None:
                children.setdefault(p, []).append(name)
        for kids in children.values():
            kids.sort()

        roots_set = set(roots)
        roots_set.update(name for name in names if primary[name] is None)

        return Hierarchy(
            primary_parent=primary,
            dag_parents=dag_parents,
            extra_parents=extra_parents,
            children=children,
            roots=sorted(roots_set),
        )

    def _break_primary_cycles(self, names: list[str], primary: dict[str, str | None]) -> None:
        """Promote the smallest node of every primary-parent cycle to a root."""
        VISITING, DONE = 1, 2
        state: dict[str, int] = {}

        for start in names:
            path = []
            cur = start
            while cur is not None and cur not in state:
                state[cur] = VISITING
                path.append(cur)
                cur = primary.get(cur)

            if cur is not None and state[cur] == VISITING:
                cycle = path[path.index(cur):]
                breaker = min(cycle)
                primary[breaker] = None
                self.diagnostics.warn(
                    PRIMARY_CYCLE_BROKEN,
                    f"primary parents form a cycle ({' -> '.join(cycle)}); "
                    f"treating {breaker} as a root",
                    location=f"node:{breaker}",
                )

            for n in path:
                state[n] = DONE
