from geogame import db, bcrypt
from flask_login import UserMixin


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(16), nullable=False, default='user')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        if not isinstance(password, str) or not password:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self):
        return {
            'name': self.name,
            'userName': self.username,
            'role': self.role,
        }


class PlayerPosition(db.Model):
    """Last known location of a player. One row per user name."""
    __tablename__ = 'player_position'
    id = db.Column(db.Integer, primary_key=True)
    user_name = db.Column(db.String(64), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(64), nullable=False)
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    # Naive UTC; the store expires rows on this column
    last_updated = db.Column(db.DateTime, nullable=False, index=True)

    __table_args__ = (
        db.Index('idx_player_position_location', 'latitude', 'longitude'),
    )


class Post(db.Model):
    __tablename__ = 'post'
    id = db.Column(db.String(64), primary_key=True)
    task_text = db.Column(db.Text, nullable=False)
    is_url_task = db.Column(db.Boolean, nullable=False, default=False)
    task_solution = db.Column(db.Text, nullable=True)
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)

    __table_args__ = (
        db.Index('idx_post_location', 'latitude', 'longitude'),
    )

    def to_dict(self):
        # task_solution stays server side
        return {
            'postId': self.id,
            'task': self.task_text,
            'isUrl': self.is_url_task,
            'lat': self.latitude,
            'lon': self.longitude,
        }
