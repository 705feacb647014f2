"""Eyedropper capability.

Placement never depends on a picker being available; a picker that cannot
sample returns None.
"""

import re
from typing import Callable, Optional, Protocol

from .viewport import ViewportController

HEX_COLOR = re.compile(r'^#([0-9A-Fa-f]{6}|[0-9A-Fa-f]{3})$')
BACKGROUND = '#FFFFFF'


def normalize_color(value: str) -> Optional[str]:
    """'#abc' / 'abc' / '#AABBCC' -> '#AABBCC'; None if not a hex colour."""
    if not value:
        return None
    if not value.startswith('#'):
        value = '#' + value
    if not HEX_COLOR.match(value):
        return None
    digits = value[1:]
    if len(digits) == 3:
        digits = ''.join(c * 2 for c in digits)
    return '#' + digits.upper()


class ColorPicker(Protocol):
    def pick_color_from_screen(self) -> Optional[str]:
        ...


class UnavailableColorPicker:
    def pick_color_from_screen(self) -> Optional[str]:
        return None


class GridColorPicker:
    """Samples the locally rendered grid at the last pointer position."""

    def __init__(self, viewport: ViewportController, grid_source: Callable[[], Optional[list]]):
        self.viewport = viewport
        self.grid_source = grid_source
        self.pointer = None

    def track(self, screen_x: float, screen_y: float) -> None:
        self.pointer = (screen_x, screen_y)

    def pick_color_from_screen(self) -> Optional[str]:
        grid = self.grid_source()
        if grid is None or self.pointer is None:
            return None
        cell = self.viewport.resolve_cell(*self.pointer)
        if cell is None:
            return None
        x, y = cell
        return grid[y][x] or BACKGROUND
