from dataclasses import dataclass
from typing import List

from flask import current_app

from geogame.errors import ValidationError
from geogame.geo import validate_distance, validate_point


@dataclass(frozen=True)
class NearbyResult:
    """A player found near the requester.

    ``latitude``/``longitude`` are the requester's own query coordinates,
    not the matched player's. Existing clients depend on this.
    """
    user_name: str
    latitude: float
    longitude: float

    def to_dict(self):
        return {'userName': self.user_name, 'lat': self.latitude, 'lon': self.longitude}


class ProximityMatcher:
    def __init__(self, tracker, spatial_store, max_search_distance: float = 0):
        self._tracker = tracker
        self._store = spatial_store
        self._max_search_distance = max_search_distance

    def find_nearby(self, user_name: str, password: str, longitude, latitude, max_distance) -> List[NearbyResult]:
        """Check the requester in, then list other live players within ``max_distance`` meters.

        Results are nearest first, never include the requester, and a player
        exactly ``max_distance`` away counts as near. An empty list means
        nobody is in range.
        """
        user = self._tracker.authenticate(user_name, password)
        lat, lon = validate_point(latitude, longitude)
        distance = validate_distance(max_distance)
        if self._max_search_distance and distance > self._max_search_distance:
            raise ValidationError(f'distance may not exceed {self._max_search_distance} meters')

        self._tracker.record(user, lon, lat)
        matches = self._store.live_positions_near(lat, lon, distance, exclude_user=user.username)

        results = [NearbyResult(user_name=position.user_name, latitude=lat, longitude=lon)
                   for position, _ in matches]
        current_app.logger.info(f"[nearby] user={user.username} radius={distance} found={len(results)}")
        return results
