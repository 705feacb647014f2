class CooldownClock:
    """Local countdown between server polls.

    The local value is only an estimate: ``reconcile`` overwrites it with
    whatever the server last reported.
    """

    def __init__(self):
        self._remaining = 0

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def active(self) -> bool:
        return self._remaining > 0

    def start(self, seconds) -> None:
        self._remaining = max(0, int(seconds))

    def reconcile(self, server_seconds) -> None:
        self._remaining = max(0, int(server_seconds or 0))

    def clear(self) -> None:
        self._remaining = 0

    def tick(self) -> bool:
        """Advance one second. True when this tick brought the countdown to zero."""
        if self._remaining <= 0:
            return False
        self._remaining -= 1
        return self._remaining == 0
