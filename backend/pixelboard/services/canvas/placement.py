import time
from dataclasses import dataclass
from typing import Optional

from flask import current_app

from pixelboard.models import Placement
from .cooldown import CooldownGate
from .errors import OnCooldown, PlacementError, Unauthenticated
from .grid_store import GridStore


@dataclass(frozen=True)
class Identity:
    id: str
    username: str

    @classmethod
    def from_user(cls, user) -> Optional['Identity']:
        if user is None or not getattr(user, 'is_authenticated', False):
            return None
        return cls(id=str(user.id), username=user.username)


@dataclass
class PlacementResult:
    record: Optional[Placement] = None
    error: Optional[PlacementError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self):
        if self.error is not None:
            return self.error.to_dict()
        return {
            'success': True,
            'message': 'Pixel placed successfully!',
            'placement': self.record.to_dict(),
        }


class PlacementService:
    """The single user-facing write path onto the canvas.

    Checks run in a fixed order and the first failure wins:
    identity, cooldown, coordinates/colour, then the grid write. The
    cooldown is recorded only after the grid write has committed.
    """

    def __init__(self, grid: GridStore, cooldowns: CooldownGate, snapshots=None):
        self.grid = grid
        self.cooldowns = cooldowns
        self.snapshots = snapshots

    @classmethod
    def from_config(cls, config, snapshots=None) -> 'PlacementService':
        return cls(GridStore.from_config(config), CooldownGate.from_config(config), snapshots=snapshots)

    def place(self, x, y, color, identity: Optional[Identity], now: Optional[float] = None) -> PlacementResult:
        if identity is None or not identity.id:
            return PlacementResult(error=Unauthenticated())

        with self.cooldowns.user_lock(identity.id):
            ts = time.time() if now is None else now
            status = self.cooldowns.check_cooldown(identity.id, now=ts)
            if status.on_cooldown:
                current_app.logger.info(
                    f"[cooldown] user={identity.id} remaining={status.remaining_seconds}s"
                )
                return PlacementResult(error=OnCooldown(status.remaining_seconds))
            try:
                record = self.grid.apply_placement(x, y, color, identity.id, identity.username, now=ts)
            except PlacementError as exc:
                current_app.logger.info(f"[place-reject] user={identity.id} reason={exc.kind}")
                return PlacementResult(error=exc)
            self.cooldowns.record_placement(identity.id, ts)

        current_app.logger.info(
            f"[place] user={identity.id} name={identity.username} ({record.x}, {record.y}) {record.color}"
        )
        if self.snapshots is not None:
            self.snapshots.maybe_snapshot(self.grid, now=ts)
        return PlacementResult(record=record)
