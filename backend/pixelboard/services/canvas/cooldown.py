import math
import threading
import time
import weakref
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from pixelboard import db
from pixelboard.models import PixelCooldown

# Entries disappear once no placement holds or waits on the lock
_user_locks = weakref.WeakValueDictionary()
_user_locks_guard = threading.Lock()


@dataclass(frozen=True)
class CooldownStatus:
    on_cooldown: bool
    remaining_seconds: int = 0

    def to_dict(self):
        return {
            'onCooldown': self.on_cooldown,
            'remainingSeconds': self.remaining_seconds,
        }


class CooldownGate:
    """Per-user minimum interval between successful placements.

    A user with no recorded placement is idle. ``record_placement`` moves the
    user to on-cooldown; the state lapses back to idle once the interval has
    elapsed. Failed attempts never touch the stored timestamp.
    """

    def __init__(self, interval_sec: int = 30):
        self.interval_sec = interval_sec

    @classmethod
    def from_config(cls, config) -> 'CooldownGate':
        return cls(interval_sec=int(config.get('PLACEMENT_COOLDOWN_SEC', 30)))

    def check_cooldown(self, user_id, now: Optional[float] = None) -> CooldownStatus:
        row = db.session.get(PixelCooldown, str(user_id))
        if row is None:
            return CooldownStatus(on_cooldown=False)
        now = time.time() if now is None else now
        elapsed = now - row.last_placement_at
        if elapsed >= self.interval_sec:
            return CooldownStatus(on_cooldown=False)
        remaining = min(self.interval_sec, math.ceil(self.interval_sec - elapsed))
        return CooldownStatus(on_cooldown=True, remaining_seconds=remaining)

    def record_placement(self, user_id, timestamp: float) -> None:
        row = db.session.get(PixelCooldown, str(user_id))
        if row is None:
            row = PixelCooldown(user_id=str(user_id), last_placement_at=timestamp)
        else:
            row.last_placement_at = timestamp
        try:
            db.session.add(row)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    @contextmanager
    def user_lock(self, user_id):
        """Hold the user's mutex so check-then-record cannot interleave."""
        key = str(user_id)
        with _user_locks_guard:
            lock = _user_locks.setdefault(key, threading.Lock())
        with lock:
            yield
