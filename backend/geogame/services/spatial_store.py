"""Spatial store: player positions with TTL expiry and posts, queried by distance.

The store handle is created once per app by ``init_spatial_store`` and handed
to the game components; nothing here keeps module-level state. Rows live in
the SQL database. Distances are great-circle meters (see ``geogame.geo``);
a bounding-box filter runs in SQL and the exact test runs in Python.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from geogame import db
from geogame.errors import ConflictError
from geogame.geo import bounding_box, haversine_m
from geogame.models import PlayerPosition, Post


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in ``last_updated``."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SpatialStore:
    def __init__(self, session, expires_after: float, clock: Callable[[], datetime] = utcnow):
        self._session = session
        self.expires_after = timedelta(seconds=expires_after)
        self._clock = clock

    def _cutoff(self) -> datetime:
        return self._clock() - self.expires_after

    # ----------------- Positions -----------------

    def upsert_position(self, user_name: str, display_name: str, latitude: float, longitude: float) -> PlayerPosition:
        """Create or overwrite the single position row of ``user_name``."""
        now = self._clock()
        try:
            try:
                self._delete_expired(now - self.expires_after, keep=user_name)
                position = self._write_position(user_name, display_name, latitude, longitude, now)
                self._session.commit()
            except IntegrityError:
                # A concurrent check-in for the same user inserted first; overwrite it
                self._session.rollback()
                position = self._write_position(user_name, display_name, latitude, longitude, now)
                self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise
        return position

    def _write_position(self, user_name, display_name, latitude, longitude, now) -> PlayerPosition:
        position = self._session.query(PlayerPosition).filter_by(user_name=user_name).first()
        if position is None:
            position = PlayerPosition(user_name=user_name)
            self._session.add(position)
        position.display_name = display_name
        position.latitude = latitude
        position.longitude = longitude
        position.last_updated = now
        self._session.flush()
        return position

    def get_position(self, user_name: str) -> Optional[PlayerPosition]:
        return (
            self._session.query(PlayerPosition)
            .filter(PlayerPosition.user_name == user_name, PlayerPosition.last_updated >= self._cutoff())
            .first()
        )

    def live_positions_near(
        self,
        latitude: float,
        longitude: float,
        max_distance: float,
        exclude_user: Optional[str] = None,
    ) -> List[Tuple[PlayerPosition, float]]:
        """Live positions within ``max_distance`` meters (inclusive), nearest first."""
        min_lat, max_lat, min_lon, max_lon = bounding_box(latitude, longitude, max_distance)
        query = self._session.query(PlayerPosition).filter(
            PlayerPosition.last_updated >= self._cutoff(),
            PlayerPosition.latitude.between(min_lat, max_lat),
        )
        if min_lon is not None:
            query = query.filter(PlayerPosition.longitude.between(min_lon, max_lon))
        if exclude_user is not None:
            query = query.filter(PlayerPosition.user_name != exclude_user)

        matches = []
        for position in query.all():
            distance = haversine_m(latitude, longitude, position.latitude, position.longitude)
            if distance <= max_distance:
                matches.append((position, distance))
        matches.sort(key=lambda m: (m[1], m[0].user_name))
        return matches

    def purge_expired(self) -> int:
        try:
            removed = self._delete_expired(self._cutoff())
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise
        if removed:
            current_app.logger.info(f"[ttl-purge] removed={removed}")
        return removed

    def _delete_expired(self, cutoff: datetime, keep: Optional[str] = None) -> int:
        query = self._session.query(PlayerPosition).filter(PlayerPosition.last_updated < cutoff)
        if keep is not None:
            # about to be overwritten anyway
            query = query.filter(PlayerPosition.user_name != keep)
        return query.delete(synchronize_session="fetch")

    # ----------------- Posts -----------------

    def add_post(self, post_id: str, task_text: str, is_url_task: bool, task_solution: Optional[str],
                 latitude: float, longitude: float) -> Post:
        if self._session.get(Post, post_id) is not None:
            raise ConflictError(f'Post {post_id} already exists')
        post = Post(
            id=post_id,
            task_text=task_text,
            is_url_task=bool(is_url_task),
            task_solution=task_solution,
            latitude=latitude,
            longitude=longitude,
        )
        self._session.add(post)
        try:
            self._session.commit()
        except IntegrityError:
            self._session.rollback()
            raise ConflictError(f'Post {post_id} already exists')
        except SQLAlchemyError:
            self._session.rollback()
            raise
        return post

    def find_post_near(self, post_id: str, latitude: float, longitude: float, max_distance: float) -> Optional[Post]:
        """The post with this id if it lies strictly within ``max_distance`` meters."""
        post = self._session.get(Post, post_id)
        if post is None:
            return None
        if haversine_m(latitude, longitude, post.latitude, post.longitude) < max_distance:
            return post
        return None


def init_spatial_store(app) -> SpatialStore:
    store = SpatialStore(db.session, expires_after=app.config.get('POSITION_EXPIRES_AFTER_SEC', 30))
    app.extensions['spatial_store'] = store
    return store
