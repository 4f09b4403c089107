"""
Log parsing for the Timely operator profile table.

Expected columns (whitespace-separated)::

    addr  activations  total_active_ms  name...

Example::

    [0, 8, 10]   33   853.886   ThresholdTotal

The operator name may contain spaces and ':'.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from flowlog_profiler.addr import Addr, parse_addr
from flowlog_profiler.errors import DuplicateLogAddressError, LogError, LogParseError

logger = logging.getLogger(__name__)

LOG_LINE_RE = re.compile(r"^\s*(\[[^\]]*\])\s+(\d+)\s+([0-9]+(?:\.[0-9]+)?)\s+(.*?)\s*$")


@dataclass(frozen=True)
class LogRow:
    """A single operator row from the profile table."""

    addr: Addr
    activations: int
    total_active_ms: float
    op_name: str


# Index by address for lookup during aggregation.
LogIndex = dict[Addr, LogRow]


def _is_header(line: str) -> bool:
    return "addr" in line and "activations" in line and "total_active_ms" in line


def parse_log_lines(lines: Iterable[str], source: str = "<log>") -> LogIndex:
    """Parse profile table lines into an address-to-row index.

    Raises:
        LogParseError: A non-blank, non-header line does not match the table.
        DuplicateLogAddressError: The same address appears twice.
    """
    out: LogIndex = {}
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip()
        if not line.strip() or _is_header(line):
            continue

        m = LOG_LINE_RE.match(line)
        if m is None:
            raise LogParseError(source, lineno, f"cannot parse line: {line!r}")

        addr_str, activations, total_ms, op_name = m.groups()
        try:
            addr = parse_addr(addr_str)
        except ValueError as e:
            raise LogParseError(source, lineno, f"bad addr {addr_str}: {e}") from e

        if addr in out:
            raise DuplicateLogAddressError(addr, f"{source}:{lineno}")

        out[addr] = LogRow(
            addr=addr,
            activations=int(activations),
            total_active_ms=float(total_ms),
            op_name=op_name,
        )

    logger.debug(f"Parsed {len(out)} log rows from {source}")
    return out


def parse_log_text(text: str, source: str = "<log>") -> LogIndex:
    return parse_log_lines(text.splitlines(), source)


def parse_log_file(path: Path | str) -> LogIndex:
    """Parse a profile table log file into an address-to-row index."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Log file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return parse_log_lines(f, str(path))


def validate_log_index(index: Mapping[Addr, LogRow]) -> LogIndex:
    """Re-check an externally built index before trusting it.

    Every key must equal its row's address and no two rows may share one.
    """
    out: LogIndex = {}
    for key, row in index.items():
        if key != row.addr:
            raise LogError(f"log index key {key} does not match row addr {row.addr}")
        if row.addr in out:
            raise DuplicateLogAddressError(row.addr)
        out[row.addr] = row
    return out
