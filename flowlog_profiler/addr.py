"""
Operator addresses.

An address is the ordered sequence of unsigned integers that Timely assigns to
every operator (e.g. ``[0, 8, 10]``). Addresses are compared element-wise, so
``[0, 2] < [0, 10] < [1]``, and are used as keys for both log rows and node
operator memberships.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True, order=True)
class Addr:
    """Immutable, totally ordered operator address."""

    parts: tuple[int, ...] = ()

    def __post_init__(self):
        parts = tuple(self.parts)
        for p in parts:
            if isinstance(p, bool) or not isinstance(p, int) or p < 0:
                raise ValueError(f"address elements must be unsigned integers: {list(parts)!r}")
        object.__setattr__(self, "parts", parts)

    @classmethod
    def of(cls, parts: Iterable[int]) -> Addr:
        return cls(tuple(parts))

    def to_list(self) -> list[int]:
        return list(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def __str__(self) -> str:
        return "[" + ", ".join(str(p) for p in self.parts) + "]"


def parse_addr(text: str) -> Addr:
    """Parse ``"[0, 8, 10]"`` into ``Addr((0, 8, 10))``.

    Raises:
        ValueError: If the text is not bracketed or an element is not an
            unsigned integer.
    """
    s = text.strip()
    if not (s.startswith("[") and s.endswith("]")):
        raise ValueError(f"addr must be bracketed: {s}")

    inner = s[1:-1].strip()
    if not inner:
        return Addr()

    parts = []
    for piece in inner.split(","):
        piece = piece.strip()
        if not piece:
            continue
        if not (piece.isascii() and piece.isdigit()):
            raise ValueError(f"bad addr element {piece!r}")
        parts.append(int(piece))
    return Addr(tuple(parts))
