"""
Viewport transform for the pan/zoom graph surface.

Screen coordinates relate to layout coordinates by
``screen = translate + scale * layout``. All operations return a new
transform; nothing here depends on the layout algorithm.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from flowlog_profiler.layout.text import fmt_num

MIN_SCALE = 0.2
MAX_SCALE = 4.0
ZOOM_K = 0.001  # wheel delta -> exponent


def clamp_scale(scale: float) -> float:
    return max(MIN_SCALE, min(MAX_SCALE, scale))


@dataclass(frozen=True)
class ViewportTransform:
    tx: float = 0.0
    ty: float = 0.0
    scale: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "scale", clamp_scale(float(self.scale)))

    def pan(self, dx: float, dy: float) -> ViewportTransform:
        """Move by a pointer delta; divided by scale so pan speed is zoom-invariant."""
        return ViewportTransform(
            tx=self.tx + dx / self.scale,
            ty=self.ty + dy / self.scale,
            scale=self.scale,
        )

    def zoom(self, wheel_delta: float, cursor_x: float, cursor_y: float) -> ViewportTransform:
        """Zoom by a wheel delta, keeping the point under the cursor fixed."""
        new_scale = clamp_scale(self.scale * math.exp(-wheel_delta * ZOOM_K))
        if new_scale == self.scale:
            return self

        k = new_scale / self.scale
        return ViewportTransform(
            tx=self.tx + (cursor_x - self.tx) * (1 - k),
            ty=self.ty + (cursor_y - self.ty) * (1 - k),
            scale=new_scale,
        )

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Layout coordinates -> screen coordinates."""
        return self.tx + x * self.scale, self.ty + y * self.scale

    def invert(self, sx: float, sy: float) -> tuple[float, float]:
        """Screen coordinates -> layout coordinates."""
        return (sx - self.tx) / self.scale, (sy - self.ty) / self.scale

    def to_svg(self) -> str:
        return f"translate({fmt_num(self.tx)} {fmt_num(self.ty)}) scale({self.scale:.4g})"

    def to_dict(self) -> dict[str, Any]:
        return {"tx": self.tx, "ty": self.ty, "scale": self.scale}
