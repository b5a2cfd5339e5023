from dataclasses import dataclass

from flask import current_app

from geogame.errors import NotReachedError, ValidationError
from geogame.geo import validate_point
from geogame.models import Post


@dataclass(frozen=True)
class ReachedPost:
    post_id: str
    task_text: str
    is_url_task: bool

    def to_dict(self):
        return {'postId': self.post_id, 'task': self.task_text, 'isUrl': self.is_url_task}


class ReachabilityChecker:
    """Decides whether a claimed location is inside a post's geofence."""

    def __init__(self, spatial_store, reach_distance: float = 15):
        self._store = spatial_store
        self.reach_distance = reach_distance

    def check_reached(self, post_id: str, latitude, longitude) -> ReachedPost:
        lat, lon = validate_point(latitude, longitude)
        post = None
        if isinstance(post_id, str) and post_id:
            post = self._store.find_post_near(post_id, lat, lon, self.reach_distance)
        if post is None:
            # Unknown id and "too far" look the same to the caller
            current_app.logger.warning(f"[not-reached] post={post_id} lat={lat} lon={lon}")
            raise NotReachedError()
        current_app.logger.info(f"[reached] post={post.id}")
        return ReachedPost(post_id=post.id, task_text=post.task_text, is_url_task=post.is_url_task)

    def add_post(self, post_id, task_text, is_url_task, task_solution, latitude, longitude) -> Post:
        if not isinstance(post_id, str) or not post_id or not task_text:
            raise ValidationError('postId and task are required')
        lat, lon = validate_point(latitude, longitude)
        post = self._store.add_post(post_id, task_text, is_url_task, task_solution, lat, lon)
        current_app.logger.info(f"[post-add] post={post.id} lat={lat} lon={lon}")
        return post
