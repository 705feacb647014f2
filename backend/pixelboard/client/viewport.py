"""Zoom, pan and hit-testing for the canvas view.

Coordinates passed in are client (screen) coordinates. The rendered grid is
centred in its container and then translated by ``(pan_x, pan_y)`` and
scaled by ``zoom_level`` around its own centre, so a grid point ``g`` sits at
``container_centre + pan + (g - grid_size / 2) * cell_size * zoom``.

Nothing here performs I/O; every method returns immediately.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

Point = Tuple[float, float]

BASE_ZOOM = 1.5
MIN_ZOOM_FACTOR_DESKTOP = 0.5
MIN_ZOOM_FACTOR_MOBILE = 0.7
MAX_ZOOM_FACTOR = 3.33
BUTTON_ZOOM_STEP = 0.5
WHEEL_ZOOM_STEP = 0.1
PINCH_ZOOM_STEP = 0.1
DRAG_THRESHOLD_PX = 3.0
CONTAINER_PADDING_PX = 32.0
DEFAULT_CELL_SIZE = 7


@dataclass(frozen=True)
class ContainerRect:
    left: float
    top: float
    width: float
    height: float


@dataclass
class ViewportState:
    zoom_level: float
    pan_x: float = 0.0
    pan_y: float = 0.0


def touch_distance(points: Sequence[Point]) -> Optional[float]:
    if len(points) < 2:
        return None
    (x1, y1), (x2, y2) = points[0], points[1]
    return math.hypot(x2 - x1, y2 - y1)


def touch_center(points: Sequence[Point]) -> Optional[Point]:
    if not points:
        return None
    if len(points) == 1:
        return points[0]
    (x1, y1), (x2, y2) = points[0], points[1]
    return ((x1 + x2) / 2, (y1 + y2) / 2)


class ViewportController:
    def __init__(
        self,
        grid_width: int,
        grid_height: int,
        container: ContainerRect,
        cell_size: float = DEFAULT_CELL_SIZE,
        is_mobile: bool = False,
        base_zoom: float = BASE_ZOOM,
        drag_threshold: float = DRAG_THRESHOLD_PX,
    ):
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.container = container
        self.cell_size = cell_size
        self.is_mobile = is_mobile
        self.base_zoom = base_zoom
        self.drag_threshold = drag_threshold
        self.state = ViewportState(zoom_level=self.min_zoom)

        self._pointer_start: Optional[Point] = None
        self._drag_anchor: Optional[Point] = None
        self._dragging = False
        self._pinch_distance: Optional[float] = None
        self._pinching = False

    # -- zoom bounds --------------------------------------------------------

    @property
    def min_zoom(self) -> float:
        factor = MIN_ZOOM_FACTOR_MOBILE if self.is_mobile else MIN_ZOOM_FACTOR_DESKTOP
        return self.base_zoom * factor

    @property
    def max_zoom(self) -> float:
        return self.base_zoom * MAX_ZOOM_FACTOR

    @property
    def zoom_percent(self) -> int:
        return round(self.state.zoom_level / self.base_zoom * 100)

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    def clamp_zoom(self, zoom: float) -> float:
        return max(self.min_zoom, min(self.max_zoom, zoom))

    # -- geometry -----------------------------------------------------------

    def rendered_size(self, zoom: Optional[float] = None) -> Point:
        z = self.state.zoom_level if zoom is None else zoom
        return (self.grid_width * self.cell_size * z, self.grid_height * self.cell_size * z)

    def clamp_pan(self, pan_x: float, pan_y: float, zoom: Optional[float] = None) -> Point:
        """Keep the grid touching the inner (unpadded) container area.

        The allowed offset from centre on each axis is half the rendered
        grid plus half the inner container: at the limit one grid edge sits
        on the opposite inner edge. An anchored zoom with the pointer over
        the grid inside that area always lands within this bound.
        """
        rendered_w, rendered_h = self.rendered_size(zoom)
        inner_w = max(0.0, self.container.width - CONTAINER_PADDING_PX)
        inner_h = max(0.0, self.container.height - CONTAINER_PADDING_PX)
        limit_x = (rendered_w + inner_w) / 2
        limit_y = (rendered_h + inner_h) / 2
        return (
            max(-limit_x, min(limit_x, pan_x)),
            max(-limit_y, min(limit_y, pan_y)),
        )

    def _local(self, screen_x: float, screen_y: float) -> Point:
        return (
            screen_x - self.container.left - self.container.width / 2,
            screen_y - self.container.top - self.container.height / 2,
        )

    def screen_to_grid(self, screen_x: float, screen_y: float) -> Point:
        """Fractional grid coordinates under a screen point."""
        lx, ly = self._local(screen_x, screen_y)
        scale = self.cell_size * self.state.zoom_level
        return (
            (lx - self.state.pan_x) / scale + self.grid_width / 2,
            (ly - self.state.pan_y) / scale + self.grid_height / 2,
        )

    def grid_to_screen(self, grid_x: float, grid_y: float) -> Point:
        scale = self.cell_size * self.state.zoom_level
        return (
            self.container.left + self.container.width / 2 + self.state.pan_x
            + (grid_x - self.grid_width / 2) * scale,
            self.container.top + self.container.height / 2 + self.state.pan_y
            + (grid_y - self.grid_height / 2) * scale,
        )

    def resolve_cell(self, screen_x: float, screen_y: float) -> Optional[Tuple[int, int]]:
        gx, gy = self.screen_to_grid(screen_x, screen_y)
        x, y = math.floor(gx), math.floor(gy)
        if 0 <= x < self.grid_width and 0 <= y < self.grid_height:
            return (x, y)
        return None

    # -- zoom ---------------------------------------------------------------

    def zoom_at(self, screen_x: float, screen_y: float, new_zoom: float) -> bool:
        """Change zoom keeping the grid point under ``(screen_x, screen_y)`` fixed."""
        new_zoom = self.clamp_zoom(new_zoom)
        old_zoom = self.state.zoom_level
        if new_zoom == old_zoom:
            return False
        lx, ly = self._local(screen_x, screen_y)
        # Offset of the anchored point from the grid centre, in cells
        cx = (lx - self.state.pan_x) / (self.cell_size * old_zoom)
        cy = (ly - self.state.pan_y) / (self.cell_size * old_zoom)
        pan_x = lx - cx * self.cell_size * new_zoom
        pan_y = ly - cy * self.cell_size * new_zoom
        self.state.zoom_level = new_zoom
        self.state.pan_x, self.state.pan_y = self.clamp_pan(pan_x, pan_y, new_zoom)
        return True

    def _container_center(self) -> Point:
        return (
            self.container.left + self.container.width / 2,
            self.container.top + self.container.height / 2,
        )

    def zoom_in(self) -> bool:
        return self.zoom_at(*self._container_center(), self.state.zoom_level + BUTTON_ZOOM_STEP)

    def zoom_out(self) -> bool:
        return self.zoom_at(*self._container_center(), self.state.zoom_level - BUTTON_ZOOM_STEP)

    def wheel(self, delta_y: float, screen_x: float, screen_y: float) -> bool:
        if delta_y == 0:
            return False
        step = -WHEEL_ZOOM_STEP if delta_y > 0 else WHEEL_ZOOM_STEP
        return self.zoom_at(screen_x, screen_y, self.state.zoom_level + step)

    def reset(self) -> None:
        self.state = ViewportState(zoom_level=self.min_zoom)
        self._cancel_pointer()
        self._pinch_distance = None
        self._pinching = False

    def set_container(self, container: ContainerRect) -> None:
        self.container = container
        self.state.pan_x, self.state.pan_y = self.clamp_pan(self.state.pan_x, self.state.pan_y)

    # -- pointer gestures ---------------------------------------------------

    def _cancel_pointer(self) -> None:
        self._pointer_start = None
        self._drag_anchor = None
        self._dragging = False

    def pointer_down(self, screen_x: float, screen_y: float) -> None:
        self._pointer_start = (screen_x, screen_y)
        self._drag_anchor = (screen_x - self.state.pan_x, screen_y - self.state.pan_y)
        self._dragging = False

    def pointer_move(self, screen_x: float, screen_y: float) -> bool:
        """Pan if the pointer has travelled past the drag threshold."""
        if self._pointer_start is None:
            return False
        if not self._dragging:
            sx, sy = self._pointer_start
            if math.hypot(screen_x - sx, screen_y - sy) <= self.drag_threshold:
                return False
            self._dragging = True
        ax, ay = self._drag_anchor
        self.state.pan_x, self.state.pan_y = self.clamp_pan(screen_x - ax, screen_y - ay)
        return True

    def pointer_up(self, screen_x: float, screen_y: float) -> Optional[Tuple[int, int]]:
        """Finish a gesture; returns the cell to paint for a click, else None."""
        if self._pointer_start is None:
            return None
        was_drag = self._dragging
        self._cancel_pointer()
        if was_drag:
            return None
        return self.resolve_cell(screen_x, screen_y)

    # -- touch gestures -----------------------------------------------------

    def touch_start(self, touches: Sequence[Point]) -> None:
        if len(touches) == 1 and not self._pinching:
            self.pointer_down(*touches[0])
        elif len(touches) >= 2:
            # A second finger turns the gesture into a pinch; no tap will follow
            self._cancel_pointer()
            self._pinching = True
            self._pinch_distance = touch_distance(touches)

    def touch_move(self, touches: Sequence[Point]) -> bool:
        if len(touches) == 1 and not self._pinching:
            return self.pointer_move(*touches[0])
        if len(touches) < 2 or not self._pinch_distance:
            return False
        distance = touch_distance(touches)
        center = touch_center(touches)
        scale = distance / self._pinch_distance
        self._pinch_distance = distance
        if scale == 1:
            return False
        step = PINCH_ZOOM_STEP if scale > 1 else -PINCH_ZOOM_STEP
        return self.zoom_at(center[0], center[1], self.state.zoom_level + step)

    def touch_end(self, remaining: Sequence[Point], released: Point) -> Optional[Tuple[int, int]]:
        """Returns the tapped cell when the last finger lifts after a plain tap."""
        if remaining:
            return None
        if self._pinching:
            self._pinching = False
            self._pinch_distance = None
            self._cancel_pointer()
            return None
        return self.pointer_up(*released)
