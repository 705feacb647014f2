from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from pixelboard.main import main
    flask_app.register_blueprint(main)

    from pixelboard.api.canvas import canvas
    flask_app.register_blueprint(canvas, url_prefix='/api')

    from pixelboard.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from pixelboard.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            for u in ['painter1', 'painter2', 'painter3']:
                user = User(username=u)
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('canvas-clear')
    def canvas_clear_command():
        """Wipes every painted cell; the placement log is kept."""
        from pixelboard.services.canvas import GridStore
        with flask_app.app_context():
            cleared = GridStore.from_config(flask_app.config).clear()
            print(f'Cleared {cleared} painted cell(s).')

    @click.command('canvas-snapshot')
    def canvas_snapshot_command():
        """Captures this week's snapshot if it has not been taken yet."""
        from pixelboard.services.canvas import GridStore, SnapshotScheduler
        with flask_app.app_context():
            store = GridStore.from_config(flask_app.config)
            snapshot = SnapshotScheduler().maybe_snapshot(store)
            if snapshot is None:
                print('No snapshot taken (already captured this week, or see the log).')
            else:
                print(f'Snapshot {snapshot.period_id} saved.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(canvas_clear_command)
    flask_app.cli.add_command(canvas_snapshot_command)

    return flask_app
