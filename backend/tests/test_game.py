import pytest

from geogame.errors import AuthError, ConflictError, NotReachedError, ValidationError
from geogame.geo import haversine_m, latitude_inside, latitude_outside
from geogame.models import PlayerPosition
from geogame.services.game import ProximityMatcher

from conftest import DISTANCE_TO_SEARCH, P_LAT, P_LON


def _names(results):
    return [r.user_name for r in results]


# ----------------- nearby players -----------------

def test_finds_only_team2(seeded):
    found = seeded.matcher.find_nearby('t1', 'secret', P_LON, P_LAT, DISTANCE_TO_SEARCH)
    assert _names(found) == ['t2']


def test_finds_team2_and_team3_nearest_first(seeded):
    found = seeded.matcher.find_nearby('t1', 'secret', P_LON, P_LAT, DISTANCE_TO_SEARCH + 5)
    assert _names(found) == ['t2', 't3']


def test_finds_nobody_in_small_radius(seeded):
    assert seeded.matcher.find_nearby('t1', 'secret', P_LON, P_LAT, 90) == []


def test_never_returns_requester(seeded):
    found = seeded.matcher.find_nearby('t2', 'secret', P_LON, P_LAT, 10_000)
    assert 't2' not in _names(found)
    assert set(_names(found)) == {'t1', 't3'}


def test_results_echo_requester_coordinates(seeded):
    found = seeded.matcher.find_nearby('t1', 'secret', P_LON, P_LAT, DISTANCE_TO_SEARCH + 5)
    for result in found:
        assert result.latitude == P_LAT
        assert result.longitude == P_LON
    assert found[0].to_dict() == {'userName': 't2', 'lat': P_LAT, 'lon': P_LON}


def test_results_ordered_by_distance(seeded, store, identity):
    identity.add_user('Team4', 't4', 'secret', role='team')
    identity.add_user('Team5', 't5', 'secret', role='team')
    store.upsert_position('t4', 'Team4', latitude_inside(P_LAT, 50), P_LON)
    store.upsert_position('t5', 'Team5', P_LAT - 20 / 111_195.0, P_LON)

    found = seeded.matcher.find_nearby('t1', 'secret', P_LON, P_LAT, DISTANCE_TO_SEARCH + 5)
    assert _names(found) == ['t5', 't4', 't2', 't3']


def test_wrong_password_is_auth_error_and_writes_nothing(seeded, store, clock):
    before = store.get_position('t1')
    stamped = before.last_updated
    clock.advance(5)

    with pytest.raises(AuthError) as excinfo:
        seeded.matcher.find_nearby('t1', 'xxxxx', 12.0, 55.0, DISTANCE_TO_SEARCH)
    assert excinfo.value.error_code == 403

    after = store.get_position('t1')
    assert after.last_updated == stamped
    assert (after.latitude, after.longitude) == (P_LAT, P_LON)


def test_unknown_user_is_auth_error(seeded):
    with pytest.raises(AuthError):
        seeded.matcher.find_nearby('nobody', 'secret', P_LON, P_LAT, DISTANCE_TO_SEARCH)
    assert PlayerPosition.query.filter_by(user_name='nobody').count() == 0


def test_query_refreshes_requester_position(seeded, store, clock):
    clock.advance(10)
    seeded.matcher.find_nearby('t1', 'secret', 12.5, 55.8, DISTANCE_TO_SEARCH)
    position = store.get_position('t1')
    assert (position.latitude, position.longitude) == (55.8, 12.5)
    assert position.last_updated == clock()


def test_invalid_coordinates_rejected_before_write(seeded, store):
    with pytest.raises(ValidationError):
        seeded.matcher.find_nearby('t1', 'secret', P_LON, 95.0, DISTANCE_TO_SEARCH)
    assert store.get_position('t1').latitude == P_LAT


def test_non_positive_distance_rejected(seeded):
    with pytest.raises(ValidationError):
        seeded.matcher.find_nearby('t1', 'secret', P_LON, P_LAT, 0)


def test_search_distance_cap(seeded, store):
    capped = ProximityMatcher(seeded.tracker, store, max_search_distance=50)
    with pytest.raises(ValidationError):
        capped.find_nearby('t1', 'secret', P_LON, P_LAT, DISTANCE_TO_SEARCH)


# ----------------- check-in / expiry -----------------

def test_repeated_check_in_keeps_one_position(seeded, clock):
    for step in range(3):
        clock.advance(1)
        seeded.tracker.check_in('t1', 'secret', P_LON + step * 0.001, P_LAT)
    assert PlayerPosition.query.filter_by(user_name='t1').count() == 1


def test_check_in_creates_position_for_new_player(seeded, identity, store):
    identity.add_user('Team9', 't9', 'secret')
    position = seeded.tracker.check_in('t9', 'secret', P_LON, P_LAT)
    assert position.display_name == 'Team9'
    assert store.get_position('t9') is not None


def test_check_in_with_wrong_password_creates_nothing(seeded, identity, store):
    identity.add_user('Team9', 't9', 'secret')
    with pytest.raises(AuthError):
        seeded.tracker.check_in('t9', 'wrong', P_LON, P_LAT)
    assert store.get_position('t9') is None


def test_expired_positions_not_found(seeded, clock):
    clock.advance(31)
    assert seeded.matcher.find_nearby('t1', 'secret', P_LON, P_LAT, DISTANCE_TO_SEARCH + 5) == []


def test_position_live_until_ttl_elapses(seeded, clock):
    clock.advance(30)
    found = seeded.matcher.find_nearby('t1', 'secret', P_LON, P_LAT, DISTANCE_TO_SEARCH + 5)
    assert _names(found) == ['t2', 't3']


def test_check_in_purges_expired_rows(seeded, clock):
    clock.advance(31)
    seeded.tracker.check_in('t1', 'secret', P_LON, P_LAT)
    assert [p.user_name for p in PlayerPosition.query.all()] == ['t1']


def test_purge_expired_returns_count(seeded, store, clock):
    assert store.purge_expired() == 0
    clock.advance(60)
    assert store.purge_expired() == 3
    assert PlayerPosition.query.count() == 0


def test_radius_boundary_is_inclusive(seeded, store):
    t2 = store.get_position('t2')
    exact = haversine_m(P_LAT, P_LON, t2.latitude, t2.longitude)
    matches = store.live_positions_near(P_LAT, P_LON, exact, exclude_user='t1')
    assert [p.user_name for p, _ in matches] == ['t2']


# ----------------- posts -----------------

def test_post_reached_inside_geofence(seeded):
    post = seeded.reachability.check_reached('Post1', latitude_inside(P_LAT, 15), 12.49)
    assert post.post_id == 'Post1'
    assert post.to_dict() == {'postId': 'Post1', 'task': '1+1', 'isUrl': False}


def test_post_not_reached_outside_geofence(seeded):
    with pytest.raises(NotReachedError) as excinfo:
        seeded.reachability.check_reached('Post1', latitude_outside(P_LAT, 15), 12.49)
    assert excinfo.value.error_code == 400


def test_post_geofence_boundary_is_exclusive(seeded, store):
    claimed_lat = latitude_inside(P_LAT, 15)
    exact = haversine_m(claimed_lat, 12.49, P_LAT, 12.49)
    assert store.find_post_near('Post1', claimed_lat, 12.49, exact) is None
    assert store.find_post_near('Post1', claimed_lat, 12.49, exact + 0.01) is not None


def test_unknown_post_not_reached(seeded):
    with pytest.raises(NotReachedError):
        seeded.reachability.check_reached('Post2', P_LAT, 12.49)


def test_add_duplicate_post_conflicts(seeded):
    with pytest.raises(ConflictError):
        seeded.reachability.add_post('Post1', 'again', False, None, P_LAT, 12.49)


def test_add_post_then_reach_it(seeded):
    seeded.reachability.add_post('Post2', 'https://example.com/q', True, 'a', 55.0, 12.0)
    post = seeded.reachability.check_reached('Post2', 55.0, 12.0)
    assert post.is_url_task is True
