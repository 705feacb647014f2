from pixelboard import db, bcrypt
from flask_login import UserMixin
from datetime import datetime, timezone
import json


def iso_timestamp(ts):
    """Render an epoch timestamp as ISO-8601 UTC, or None."""
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': str(self.id),
            'username': self.username,
        }


class CanvasCell(db.Model):
    """Current colour of one painted cell. Unpainted cells have no row."""
    __tablename__ = 'canvas_cell'
    __table_args__ = (db.UniqueConstraint('x', 'y', name='uq_canvas_cell_xy'),)
    id = db.Column(db.Integer, primary_key=True)
    x = db.Column(db.Integer, nullable=False)
    y = db.Column(db.Integer, nullable=False)
    color = db.Column(db.String(7), nullable=False)
    placed_by = db.Column(db.String(64), nullable=False)
    placed_by_name = db.Column(db.String(64), nullable=False)
    placed_at = db.Column(db.Float, nullable=False)

    def to_dict(self):
        return {
            'x': self.x,
            'y': self.y,
            'color': self.color,
            'placedBy': self.placed_by,
            'placedByName': self.placed_by_name,
            'placedAt': iso_timestamp(self.placed_at),
        }


class Placement(db.Model):
    """Append-only log of successful placements."""
    __tablename__ = 'placement'
    id = db.Column(db.Integer, primary_key=True)
    x = db.Column(db.Integer, nullable=False)
    y = db.Column(db.Integer, nullable=False)
    color = db.Column(db.String(7), nullable=False)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    username = db.Column(db.String(64), nullable=False)
    timestamp = db.Column(db.Float, nullable=False, index=True)

    def to_dict(self):
        return {
            'x': self.x,
            'y': self.y,
            'color': self.color,
            'userId': self.user_id,
            'username': self.username,
            'timestamp': iso_timestamp(self.timestamp),
        }


class PixelCooldown(db.Model):
    __tablename__ = 'pixel_cooldown'
    user_id = db.Column(db.String(64), primary_key=True)
    last_placement_at = db.Column(db.Float, nullable=False)


class CanvasSnapshot(db.Model):
    __tablename__ = 'canvas_snapshot'
    id = db.Column(db.Integer, primary_key=True)
    period_id = db.Column(db.String(16), unique=True, nullable=False, index=True)
    taken_at = db.Column(db.Float, nullable=False)
    width = db.Column(db.Integer, nullable=False)
    height = db.Column(db.Integer, nullable=False)
    grid = db.Column(db.Text, nullable=False)  # JSON-encoded rows of colour strings / null
    image_svg = db.Column(db.Text, nullable=False)
    total_pixels = db.Column(db.Integer, nullable=False, default=0)
    unique_users = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self, include_grid=True):
        data = {
            'id': f"snapshot-{self.period_id}",
            'week': self.period_id,
            'timestamp': iso_timestamp(self.taken_at),
            'width': self.width,
            'height': self.height,
            'totalPixels': self.total_pixels,
            'uniqueUsers': self.unique_users,
            'imageSvg': self.image_svg,
        }
        if include_grid:
            data['grid'] = json.loads(self.grid)
        return data
