import json
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pixelboard import db, socketio
from pixelboard.models import CanvasSnapshot
from .errors import SnapshotFailure
from .grid_store import GridState, GridStore

BACKGROUND = '#FFFFFF'

_worker_started = False


def period_id(now: Optional[float] = None) -> str:
    """ISO calendar week containing ``now`` (UTC), e.g. ``2025-W38``."""
    ts = time.time() if now is None else now
    year, week, _ = datetime.fromtimestamp(ts, tz=timezone.utc).isocalendar()
    return f"{year}-W{week:02d}"


def previous_period_id(now: Optional[float] = None) -> str:
    ts = time.time() if now is None else now
    return period_id(ts - timedelta(days=7).total_seconds())


def render_svg(state: GridState) -> str:
    parts = [
        f'<svg width="{state.width}" height="{state.height}" xmlns="http://www.w3.org/2000/svg" '
        'style="image-rendering: pixelated;">',
        f'<rect width="{state.width}" height="{state.height}" fill="{BACKGROUND}"/>',
    ]
    for y, row in enumerate(state.grid):
        for x, color in enumerate(row):
            if color and color.upper() != BACKGROUND:
                parts.append(f'<rect x="{x}" y="{y}" width="1" height="1" fill="{color}"/>')
    parts.append('</svg>')
    return ''.join(parts)


class SnapshotScheduler:
    """Keeps at most one immutable grid snapshot per calendar week."""

    def period_id(self, now: Optional[float] = None) -> str:
        return period_id(now)

    def get(self, period: str) -> Optional[CanvasSnapshot]:
        return CanvasSnapshot.query.filter_by(period_id=period).first()

    def should_snapshot(self, now: Optional[float] = None) -> bool:
        return self.get(self.period_id(now)) is None

    def take_snapshot(self, state: GridState, now: Optional[float] = None) -> Optional[CanvasSnapshot]:
        """Persist ``state`` for the current period.

        Returns None when the period is already captured, including when a
        concurrent writer wins the unique-constraint race. Storage errors
        surface as ``SnapshotFailure``.
        """
        ts = time.time() if now is None else now
        period = self.period_id(ts)
        if not self.should_snapshot(ts):
            current_app.logger.info(f"[snapshot-skip] period={period} already captured")
            return None
        snapshot = CanvasSnapshot(
            period_id=period,
            taken_at=ts,
            width=state.width,
            height=state.height,
            grid=json.dumps(state.grid),
            image_svg=render_svg(state),
            total_pixels=state.total_pixels,
            unique_users=state.unique_users,
        )
        try:
            db.session.add(snapshot)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            current_app.logger.info(f"[snapshot-skip] period={period} captured concurrently")
            return None
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise SnapshotFailure(f"Could not store snapshot {period}: {exc}") from exc
        current_app.logger.info(
            f"[snapshot-taken] period={period} pixels={state.total_pixels} users={state.unique_users}"
        )
        return snapshot

    def maybe_snapshot(self, store: GridStore, now: Optional[float] = None) -> Optional[CanvasSnapshot]:
        """Take the period's snapshot if it is due. Never raises."""
        try:
            if not self.should_snapshot(now):
                return None
            return self.take_snapshot(store.get_grid(), now=now)
        except Exception as exc:
            db.session.rollback()
            current_app.logger.exception(f"[snapshot-failed] {exc}")
            return None

    def latest_for_display(self, now: Optional[float] = None) -> Optional[CanvasSnapshot]:
        """Last week's snapshot, falling back to this week's."""
        return self.get(previous_period_id(now)) or self.get(self.period_id(now))


def start_snapshot_worker(app) -> bool:
    """Run the weekly snapshot check in a Socket.IO background task.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Honours ENABLE_SNAPSHOT_WORKER
    - Starts at most one worker per process
    """
    global _worker_started
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return False
    if not app.config.get('ENABLE_SNAPSHOT_WORKER', True) or _worker_started:
        return False
    _worker_started = True
    interval = int(app.config.get('SNAPSHOT_CHECK_INTERVAL_SEC', 3600))

    def _worker(delay: int):
        while True:
            with app.app_context():
                app.logger.info(f"[snapshot-worker] checking period={period_id()}")
                SnapshotScheduler().maybe_snapshot(GridStore.from_config(app.config))
                db.session.remove()
            socketio.sleep(delay)

    socketio.start_background_task(_worker, interval)
    app.logger.info(f"[snapshot-worker] started interval={interval}s")
    return True
