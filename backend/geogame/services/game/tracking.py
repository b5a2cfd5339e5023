from flask import current_app

from geogame.errors import AuthError, UserNotFoundError
from geogame.geo import validate_point
from geogame.models import PlayerPosition, User


class PositionTracker:
    """Keeps each player's last check-in in the spatial store.

    Expiry is the store's job: a position simply stops being live once its
    ``last_updated`` is older than the store's TTL.
    """

    def __init__(self, spatial_store, identity_store):
        self._store = spatial_store
        self._identity = identity_store

    def authenticate(self, user_name: str, password: str) -> User:
        """Resolve the user, then check the password. Either failure is an AuthError."""
        try:
            self._identity.get_user(user_name)
            return self._identity.verify_credentials(user_name, password)
        except (UserNotFoundError, AuthError):
            current_app.logger.warning(f"[auth-fail] user={user_name}")
            raise AuthError()

    def check_in(self, user_name: str, password: str, longitude, latitude) -> PlayerPosition:
        user = self.authenticate(user_name, password)
        return self.record(user, longitude, latitude)

    def record(self, user: User, longitude, latitude) -> PlayerPosition:
        """Upsert the position of an already authenticated user."""
        lat, lon = validate_point(latitude, longitude)
        position = self._store.upsert_position(user.username, user.name, lat, lon)
        current_app.logger.info(f"[checkin] user={user.username} lat={lat} lon={lon}")
        return position
