"""
Node Graph Builder.

Flattens ops spec node records into a single name -> NodeSpec map, validates
structural invariants, and derives the raw DAG parent/child edges.

Checks, in order:
1. Unique node ids across every bucket
2. At least one node
3. Every child id (and declared parent id) references an existing node

A cyclic topology is accepted but reported as a diagnostic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from flowlog_profiler.addr import Addr
from flowlog_profiler.diagnostics import CYCLIC_TOPOLOGY, Diagnostics
from flowlog_profiler.errors import (
    DanglingChildError,
    DanglingParentError,
    DuplicateIdError,
    EmptySpecError,
)
from flowlog_profiler.layout.graph_convert import find_cycle
from flowlog_profiler.ops.parser import OpsSpec, RawNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeSpec:
    """Flattened, validated node ready for aggregation."""

    id: int
    label: str
    children: tuple[int, ...] = ()
    operators: frozenset[Addr] = frozenset()
    declared_parents: tuple[int, ...] = ()
    tags: tuple[str, ...] = ()
    block: str = ""
    fingerprint: str | None = None

    @property
    def name(self) -> str:
        return str(self.id)

    @classmethod
    def from_raw(cls, raw: RawNode) -> NodeSpec:
        return cls(
            id=raw.id,
            label=raw.label,
            children=tuple(raw.children),
            operators=frozenset(raw.operators),
            declared_parents=tuple(raw.parents),
            tags=tuple(raw.tags),
            block=raw.block,
            fingerprint=raw.fingerprint,
        )


@dataclass(frozen=True)
class NodeGraph:
    """Validated topology: nodes keyed by name plus derived DAG edges."""

    nodes: dict[str, NodeSpec]
    parents: dict[str, list[str]]  # child -> DAG parents (edge discovery order)
    children: dict[str, list[str]]  # parent -> DAG children (edge discovery order)
    roots: list[str] = field(default_factory=list)  # names with no DAG parent, by id

    def dag_parents(self, name: str) -> list[str]:
        return self.parents.get(name, [])

    def dag_children(self, name: str) -> list[str]:
        return self.children.get(name, [])

    def edges(self) -> list[tuple[str, str]]:
        return [(p, c) for p, kids in self.children.items() for c in kids]

    def __len__(self) -> int:
        return len(self.nodes)


class NodeGraphBuilder:
    """Builds a NodeGraph from node records gathered from every bucket."""

    def __init__(self, diagnostics: Diagnostics | None = None):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def build(self, records: Iterable[RawNode | NodeSpec]) -> NodeGraph:
        """
        Flatten, validate and derive edges.

        Raises:
            DuplicateIdError: Two records share an id
            EmptySpecError: No records were supplied
            DanglingChildError: A child id has no record
            DanglingParentError: A declared parent id has no record
        """
        by_id: dict[int, NodeSpec] = {}
        for rec in records:
            spec = rec if isinstance(rec, NodeSpec) else NodeSpec.from_raw(rec)
            if spec.id in by_id:
                raise DuplicateIdError(spec.id)
            by_id[spec.id] = spec

        if not by_id:
            raise EmptySpecError()

        ordered_ids = sorted(by_id)
        for nid in ordered_ids:
            for cid in by_id[nid].children:
                if cid not in by_id:
                    raise DanglingChildError(nid, cid)
            for pid in by_id[nid].declared_parents:
                if pid not in by_id:
                    raise DanglingParentError(nid, pid)

        parents: dict[str, list[str]] = {}
        children: dict[str, list[str]] = {}
        seen: set[tuple[int, int]] = set()

        def add_edge(pid: int, cid: int) -> None:
            if (pid, cid) in seen:
                return
            seen.add((pid, cid))
            children.setdefault(str(pid), []).append(str(cid))
            parents.setdefault(str(cid), []).append(str(pid))

        for nid in ordered_ids:
            for cid in by_id[nid].children:
                add_edge(nid, cid)
        for nid in ordered_ids:
            for pid in by_id[nid].declared_parents:
                add_edge(pid, nid)

        roots = [str(nid) for nid in ordered_ids if str(nid) not in parents]
        nodes = {name: by_id[int(name)] for name in sorted(str(nid) for nid in ordered_ids)}

        cycle = find_cycle(children)
        if cycle:
            self.diagnostics.warn(
                CYCLIC_TOPOLOGY,
                f"ops spec topology contains a cycle: {' -> '.join(cycle)}",
                location=f"node:{cycle[0]}",
            )

        logger.debug(
            f"Built node graph: {len(nodes)} nodes, {len(seen)} edges, {len(roots)} roots"
        )
        return NodeGraph(nodes=nodes, parents=parents, children=children, roots=roots)

    def build_from_spec(self, spec: OpsSpec) -> NodeGraph:
        return self.build(spec.all_nodes())
