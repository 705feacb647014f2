"""Client-side canvas components: viewport math, polling session, cooldown clock.

These talk to the server over HTTP only and never touch the database.
"""

from .api import CanvasApi, Identity, TransientNetworkFailure
from .color_picker import ColorPicker, GridColorPicker, UnavailableColorPicker, normalize_color
from .cooldown_clock import CooldownClock
from .notifications import LoggingNotificationSink, NotificationSink
from .session import CanvasSession
from .viewport import ContainerRect, ViewportController, ViewportState
