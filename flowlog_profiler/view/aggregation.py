"""
Aggregation Engine.

Binds each node's operator addresses to measured log rows:
1. Enforce that every address belongs to at most one node (fatal otherwise)
2. Accumulate self metrics from log-matched addresses only
3. Warn about mapped addresses that are missing from the log
4. Compute report-wide totals
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from flowlog_profiler.addr import Addr
from flowlog_profiler.diagnostics import ADDR_NOT_IN_LOG, Diagnostics
from flowlog_profiler.errors import AddressOwnershipConflictError
from flowlog_profiler.log import LogRow
from flowlog_profiler.ops.builder import NodeSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperatorView:
    """A log-matched operator owned by a node."""

    addr: Addr
    op_name: str
    activations: int
    total_active_ms: float

    @classmethod
    def from_row(cls, row: LogRow) -> OperatorView:
        return cls(
            addr=row.addr,
            op_name=row.op_name,
            activations=row.activations,
            total_active_ms=row.total_active_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "addr": self.addr.to_list(),
            "op_name": self.op_name,
            "activations": self.activations,
            "total_active_ms": self.total_active_ms,
        }


@dataclass(frozen=True)
class NodeAggregate:
    """Self metrics for one node."""

    name: str
    self_activations: int = 0
    self_total_active_ms: float = 0.0
    operators: tuple[OperatorView, ...] = ()


@dataclass(frozen=True)
class TotalsView:
    """Report-wide totals."""

    names: int
    operators_in_log: int
    operators_mapped: int
    total_mapped_ms: float
    total_mapped_activations: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "names": self.names,
            "operators_in_log": self.operators_in_log,
            "operators_mapped": self.operators_mapped,
            "total_mapped_ms": self.total_mapped_ms,
            "total_mapped_activations": self.total_mapped_activations,
        }


@dataclass(frozen=True)
class AggregationResult:
    nodes: dict[str, NodeAggregate]
    totals: TotalsView
    owners: dict[Addr, str] = field(default_factory=dict)
    missing: tuple[tuple[str, Addr], ...] = ()  # (node name, addr) not found in log


class AggregationEngine:
    """Aggregates log rows onto logical nodes."""

    def __init__(self, diagnostics: Diagnostics | None = None):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    @staticmethod
    def build_ownership(nodes: Mapping[str, NodeSpec]) -> dict[Addr, str]:
        """
        Map every operator address to its single owning node name.

        Raises:
            AddressOwnershipConflictError: As soon as a second owner is found.
        """
        owner: dict[Addr, str] = {}
        for name, spec in nodes.items():
            for addr in sorted(spec.operators):
                prev = owner.get(addr)
                if prev is not None and prev != name:
                    raise AddressOwnershipConflictError(addr, prev, name)
                owner[addr] = name
        return owner

    def aggregate(
        self,
        nodes: Mapping[str, NodeSpec],
        log: Mapping[Addr, LogRow],
    ) -> AggregationResult:
        owners = self.build_ownership(nodes)

        per_node: dict[str, NodeAggregate] = {}
        missing: list[tuple[str, Addr]] = []
        total_ms = 0.0
        total_act = 0
        mapped = 0

        for name, spec in nodes.items():
            operators: list[OperatorView] = []
            self_ms = 0.0
            self_act = 0

            # Sorted by addr for deterministic summation and output
            for addr in sorted(spec.operators):
                row = log.get(addr)
                if row is None:
                    missing.append((name, addr))
                    self.diagnostics.warn(
                        ADDR_NOT_IN_LOG,
                        f"ops spec maps name '{name}' to addr {addr}, but addr not found in log",
                        location=f"node:{name}",
                    )
                    continue

                operators.append(OperatorView.from_row(row))
                self_ms += row.total_active_ms
                self_act += row.activations
                total_ms += row.total_active_ms
                total_act += row.activations

            mapped += len(operators)

            per_node[name] = NodeAggregate(
                name=name,
                self_activations=self_act,
                self_total_active_ms=self_ms,
                operators=tuple(operators),
            )

        totals = TotalsView(
            names=len(nodes),
            operators_in_log=len(log),
            operators_mapped=mapped,
            total_mapped_ms=total_ms,
            total_mapped_activations=total_act,
        )
        logger.debug(
            f"Aggregated {mapped}/{len(log)} log operators onto {len(nodes)} names "
            f"({len(missing)} mapped addrs missing)"
        )
        return AggregationResult(
            nodes=per_node, totals=totals, owners=owners, missing=tuple(missing)
        )
