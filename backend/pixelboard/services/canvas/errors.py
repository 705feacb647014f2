"""Error kinds raised by the canvas services.

Placement errors are expected, user-facing conditions: routes turn them into
JSON responses and clients show ``message`` in a toast. ``SnapshotFailure``
is only ever logged.
"""


class CanvasError(Exception):
    kind = 'canvas_error'
    status_code = 400
    default_message = 'Canvas error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {'success': False, 'error': self.kind, 'message': self.message}


class PlacementError(CanvasError):
    kind = 'placement_error'
    default_message = 'Failed to place pixel'


class Unauthenticated(PlacementError):
    kind = 'unauthenticated'
    status_code = 401
    default_message = 'Please sign in to place pixels'


class OnCooldown(PlacementError):
    kind = 'on_cooldown'
    status_code = 429

    def __init__(self, remaining_seconds: int):
        self.remaining_seconds = int(remaining_seconds)
        super().__init__(
            f'Please wait {self.remaining_seconds} more second(s) before placing another pixel'
        )

    def to_dict(self):
        data = super().to_dict()
        data['remainingCooldown'] = self.remaining_seconds
        return data


class OutOfBounds(PlacementError):
    kind = 'out_of_bounds'
    default_message = 'Invalid coordinates'


class InvalidColor(PlacementError):
    kind = 'invalid_color'
    default_message = 'Invalid color format'


class SnapshotFailure(CanvasError):
    kind = 'snapshot_failure'
    status_code = 500
    default_message = 'Failed to save weekly snapshot'
