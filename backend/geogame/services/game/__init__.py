"""Game domain services: position tracking, nearby players, post reachability.

HTTP routes and CLI commands go through these components instead of
touching the stores directly, keeping transport concerns separated from
the game rules.
"""

from dataclasses import dataclass

from flask import current_app

from .tracking import PositionTracker
from .proximity import NearbyResult, ProximityMatcher
from .reachability import ReachabilityChecker, ReachedPost


@dataclass
class GameComponents:
    tracker: PositionTracker
    matcher: ProximityMatcher
    reachability: ReachabilityChecker


def init_game(app, spatial_store, identity_store) -> GameComponents:
    tracker = PositionTracker(spatial_store, identity_store)
    components = GameComponents(
        tracker=tracker,
        matcher=ProximityMatcher(
            tracker,
            spatial_store,
            max_search_distance=app.config.get('MAX_SEARCH_DISTANCE_M', 0),
        ),
        reachability=ReachabilityChecker(
            spatial_store,
            reach_distance=app.config.get('POST_REACHED_DISTANCE_M', 15),
        ),
    )
    app.extensions['game'] = components
    return components


def get_game() -> GameComponents:
    return current_app.extensions['game']


__all__ = [
    'GameComponents',
    'NearbyResult',
    'PositionTracker',
    'ProximityMatcher',
    'ReachabilityChecker',
    'ReachedPost',
    'get_game',
    'init_game',
]
