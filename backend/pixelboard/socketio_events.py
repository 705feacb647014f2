from flask import current_app
from flask_socketio import join_room, leave_room, emit
from pixelboard import socketio
from pixelboard.services.canvas import GridStore

CANVAS_ROOM = 'canvas'


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_canvas(data=None):
    join_room(CANVAS_ROOM)
    emit('joined', {'room': CANVAS_ROOM})
    # New viewers get the full grid immediately instead of waiting for a poll
    state = GridStore.from_config(current_app.config).get_grid()
    emit('canvas_state', state.to_dict())


def handle_leave_canvas(data=None):
    leave_room(CANVAS_ROOM)
    emit('left', {'room': CANVAS_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = {
        'connect': handle_connect,
        'join_canvas': handle_join_canvas,
        'leave_canvas': handle_leave_canvas,
        'ping': handle_ping,
    }
    for event, handler in handlers.items():
        socketio.on_event(event, handler, namespace='/ws')
        if testing:
            socketio.on_event(event, handler, namespace='/')
