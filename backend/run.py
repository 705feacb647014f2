from pixelboard import create_app, socketio
from pixelboard.services.canvas import start_snapshot_worker

app = create_app()

if __name__ == '__main__':
    # Weekly snapshot check runs alongside the Socket.IO dev server
    start_snapshot_worker(app)
    socketio.run(app, debug=True)
