"""Canvas domain services: grid store, cooldowns, placement, snapshots.

Routes and socket handlers import from here, keeping transport concerns
separated from the canvas mechanics.
"""

from .errors import (
    CanvasError,
    InvalidColor,
    OnCooldown,
    OutOfBounds,
    PlacementError,
    SnapshotFailure,
    Unauthenticated,
)
from .grid_store import GridState, GridStore, is_valid_color
from .cooldown import CooldownGate, CooldownStatus
from .placement import Identity, PlacementResult, PlacementService
from .snapshots import SnapshotScheduler, period_id, render_svg, start_snapshot_worker
