import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Optional

from .api import Identity, TransientNetworkFailure
from .color_picker import UnavailableColorPicker, normalize_color
from .cooldown_clock import CooldownClock
from .notifications import ERROR, INFO, SUCCESS, LoggingNotificationSink
from .viewport import ViewportController

_log = logging.getLogger(__name__)

DEFAULT_COLOR = '#000000'


class CanvasSession:
    """Client view of the canvas kept in step with the server by polling.

    The grid is replaced wholesale on every refresh. The cooldown clock ticks
    locally once a second and is overwritten by each server answer.
    """

    def __init__(
        self,
        api,
        identity: Optional[Identity] = None,
        notifier=None,
        color_picker=None,
        refresh_interval: float = 5.0,
        tick_interval: float = 1.0,
        cooldown_seconds: int = 30,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.api = api
        self.identity = identity
        self.notifier = notifier or LoggingNotificationSink()
        self.color_picker = color_picker or UnavailableColorPicker()
        self.refresh_interval = refresh_interval
        self.tick_interval = tick_interval
        self.cooldown_seconds = cooldown_seconds
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=4)

        self.canvas: Optional[dict] = None
        self.stats: Optional[dict] = None
        self.clock = CooldownClock()
        self.selected_color = DEFAULT_COLOR
        self.is_placing = False

    def close(self) -> None:
        """Shut down the worker pool if this session created it."""
        if self._owns_executor:
            self.executor.shutdown(wait=True)

    async def __aenter__(self) -> 'CanvasSession':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def grid(self) -> Optional[list]:
        return self.canvas['grid'] if self.canvas else None

    async def _call(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, partial(func, *args))

    # -- polling ------------------------------------------------------------

    async def refresh(self) -> bool:
        try:
            data = await self._call(self.api.get_grid)
        except TransientNetworkFailure as exc:
            _log.warning(f"Canvas refresh failed, retrying next interval: {exc}")
            return False
        if not data.get('success') or 'canvas' not in data:
            _log.warning(f"Canvas refresh returned no canvas: {data.get('error')}")
            return False
        self.canvas = data['canvas']
        self.stats = data.get('stats')
        return True

    async def sync_cooldown(self) -> bool:
        if self.identity is None:
            return False
        try:
            data = await self._call(self.api.get_cooldown, self.identity.id)
        except TransientNetworkFailure as exc:
            _log.warning(f"Cooldown check failed: {exc}")
            return False
        if not data.get('success'):
            return False
        self.clock.reconcile(data.get('remainingSeconds', 0) if data.get('onCooldown') else 0)
        return True

    async def tick(self) -> None:
        if self.clock.tick():
            # Local countdown ran out; ask the server before unlocking
            await self.sync_cooldown()

    async def run(self, stop: Optional[asyncio.Event] = None) -> None:
        stop = stop or asyncio.Event()
        await self.refresh()
        await self.sync_cooldown()
        since_refresh = 0.0
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.tick_interval)
                break
            except asyncio.TimeoutError:
                pass
            await self.tick()
            since_refresh += self.tick_interval
            if since_refresh >= self.refresh_interval:
                since_refresh = 0.0
                await self.refresh()

    # -- placement ----------------------------------------------------------

    async def click(self, x: int, y: int) -> bool:
        if self.is_placing:
            return False
        if self.identity is None:
            self.notifier.notify('Please sign in to place pixels', ERROR)
            return False
        if self.clock.active:
            self.notifier.notify(f'Please wait {self.clock.remaining} more second(s)', ERROR)
            return False

        self.is_placing = True
        try:
            try:
                data = await self._call(self.api.place, x, y, self.selected_color, self.identity)
            except TransientNetworkFailure as exc:
                _log.error(f"Error placing pixel: {exc}")
                self.notifier.notify('Failed to place pixel', ERROR)
                return False

            if data.get('success'):
                self.notifier.notify(data.get('message') or 'Pixel placed successfully!', SUCCESS, 3000)
                self.clock.start(self.cooldown_seconds)
                await self.refresh()
                await self.sync_cooldown()
                return True

            self.notifier.notify(data.get('message') or data.get('error') or 'Failed to place pixel', ERROR)
            if data.get('remainingCooldown'):
                self.clock.reconcile(data['remainingCooldown'])
            return False
        finally:
            self.is_placing = False

    async def pointer_up(self, viewport: ViewportController, screen_x: float, screen_y: float) -> bool:
        cell = viewport.pointer_up(screen_x, screen_y)
        if cell is None:
            return False
        return await self.click(*cell)

    # -- colour selection ---------------------------------------------------

    def select_color(self, value: str) -> bool:
        color = normalize_color(value)
        if color is None:
            return False
        self.selected_color = color
        return True

    def pick_color(self) -> bool:
        color = self.color_picker.pick_color_from_screen()
        if color is None or not self.select_color(color):
            self.notifier.notify('Color picker is not available here', INFO)
            return False
        return True
