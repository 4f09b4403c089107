"""
Fatal error types.

Every condition that aborts a report run derives from ProfilerError so the CLI
can catch one type. Each error keeps the offending values as attributes.
"""

from __future__ import annotations

from flowlog_profiler.addr import Addr


class ProfilerError(Exception):
    """Base class for all fatal profiler errors."""


# ── Topology ─────────────────────────────────────────────────────────────────


class TopologyError(ProfilerError):
    """The ops spec topology violates a structural invariant."""


class EmptySpecError(TopologyError):
    def __init__(self, source: str = "ops spec"):
        self.source = source
        super().__init__(f"{source} contained no nodes")


class DuplicateIdError(TopologyError):
    def __init__(self, node_id: int):
        self.node_id = node_id
        super().__init__(f"duplicate node id in ops spec: {node_id}")


class DanglingChildError(TopologyError):
    def __init__(self, node_id: int, child_id: int):
        self.node_id = node_id
        self.child_id = child_id
        super().__init__(f"node {node_id} references missing child id {child_id}")


class DanglingParentError(TopologyError):
    def __init__(self, node_id: int, parent_id: int):
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(f"node {node_id} declares missing parent id {parent_id}")


class OpsSpecError(ProfilerError):
    """The ops spec document is malformed (wrong shape or field types)."""

    def __init__(self, message: str, location: str = ""):
        self.location = location
        loc = f" ({location})" if location else ""
        super().__init__(f"invalid ops spec{loc}: {message}")


# ── Aggregation ──────────────────────────────────────────────────────────────


class AddressOwnershipConflictError(ProfilerError):
    """One operator address is claimed by two nodes."""

    def __init__(self, addr: Addr, first: str, second: str):
        self.addr = addr
        self.first = first
        self.second = second
        super().__init__(
            f"operator addr {addr} is assigned to multiple names: {first} and {second}"
        )


# ── Log ──────────────────────────────────────────────────────────────────────


class LogError(ProfilerError):
    """The profile log cannot be used."""


class LogParseError(LogError):
    def __init__(self, path: str, lineno: int, reason: str):
        self.path = path
        self.lineno = lineno
        self.reason = reason
        super().__init__(f"log parse error at {path}:{lineno}: {reason}")


class DuplicateLogAddressError(LogError):
    def __init__(self, addr: Addr, location: str = ""):
        self.addr = addr
        self.location = location
        at = f" at {location}" if location else ""
        super().__init__(f"duplicate addr entry in log{at}: {addr}")
