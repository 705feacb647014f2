import re
import threading
import time
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func

from pixelboard import db
from pixelboard.models import CanvasCell, Placement, iso_timestamp
from .errors import InvalidColor, OutOfBounds

HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{6}$')

# Serialises read-modify-write of cells within this process
_grid_lock = threading.Lock()


@dataclass
class GridState:
    width: int
    height: int
    grid: List[List[Optional[str]]]
    total_pixels: int
    unique_users: int
    last_updated: Optional[float]

    def color_at(self, x: int, y: int) -> Optional[str]:
        return self.grid[y][x]

    def to_dict(self):
        return {
            'width': self.width,
            'height': self.height,
            'grid': self.grid,
            'totalPixels': self.total_pixels,
            'uniqueUsers': self.unique_users,
            'lastUpdated': iso_timestamp(self.last_updated),
        }


def is_valid_color(color) -> bool:
    return isinstance(color, str) and HEX_COLOR.match(color) is not None


class GridStore:
    """Authoritative cell colours plus the placement log they were built from.

    ``apply_placement`` is the only write path for individual cells and is
    meant to be called through ``PlacementService``, which enforces cooldowns.
    """

    def __init__(self, width: int = 200, height: int = 200):
        self.width = width
        self.height = height

    @classmethod
    def from_config(cls, config) -> 'GridStore':
        return cls(
            width=int(config.get('CANVAS_WIDTH', 200)),
            height=int(config.get('CANVAS_HEIGHT', 200)),
        )

    def in_bounds(self, x, y) -> bool:
        for v in (x, y):
            # bool is an int subclass; True/False are not coordinates
            if not isinstance(v, int) or isinstance(v, bool):
                return False
        return 0 <= x < self.width and 0 <= y < self.height

    def validate(self, x, y, color) -> None:
        if not self.in_bounds(x, y):
            raise OutOfBounds()
        if not is_valid_color(color):
            raise InvalidColor()

    def get_grid(self) -> GridState:
        rows: List[List[Optional[str]]] = [[None] * self.width for _ in range(self.height)]
        for cell in CanvasCell.query.all():
            if 0 <= cell.x < self.width and 0 <= cell.y < self.height:
                rows[cell.y][cell.x] = cell.color
        total, unique, last = self._aggregates()
        return GridState(
            width=self.width,
            height=self.height,
            grid=rows,
            total_pixels=total,
            unique_users=unique,
            last_updated=last,
        )

    def _aggregates(self):
        # uniqueUsers counts everyone in the log, including painters whose cells were overwritten
        total, unique, last = db.session.query(
            func.count(Placement.id),
            func.count(func.distinct(Placement.user_id)),
            func.max(Placement.timestamp),
        ).one()
        return int(total or 0), int(unique or 0), last

    def stats(self) -> dict:
        total, unique, last = self._aggregates()
        return {
            'totalPixels': total,
            'uniqueUsers': unique,
            'lastUpdated': iso_timestamp(last),
            'canvasSize': f"{self.width}x{self.height}",
        }

    def cell_info(self, x, y) -> Optional[dict]:
        if not self.in_bounds(x, y):
            raise OutOfBounds()
        cell = CanvasCell.query.filter_by(x=x, y=y).first()
        return cell.to_dict() if cell else None

    def apply_placement(self, x, y, color, user_id, username, now: Optional[float] = None) -> Placement:
        self.validate(x, y, color)
        ts = time.time() if now is None else now
        with _grid_lock:
            try:
                cell = CanvasCell.query.filter_by(x=x, y=y).first()
                if cell is None:
                    cell = CanvasCell(x=x, y=y)
                cell.color = color
                cell.placed_by = str(user_id)
                cell.placed_by_name = username
                cell.placed_at = ts
                record = Placement(x=x, y=y, color=color, user_id=str(user_id), username=username, timestamp=ts)
                db.session.add(cell)
                db.session.add(record)
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        return record

    def clear(self) -> int:
        """Reset every cell to background. The placement log is untouched."""
        with _grid_lock:
            try:
                cleared = CanvasCell.query.delete()
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        return cleared
