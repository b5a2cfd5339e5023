from flask import Blueprint, jsonify, request

from geogame.auth import admin_required
from geogame.errors import ValidationError
from geogame.services.game import get_game

game = Blueprint('game', __name__)


def _require(data, *fields):
    missing = [f for f in fields if data.get(f) is None]
    if missing:
        raise ValidationError(f"Missing field(s): {', '.join(missing)}")


@game.route('/nearbyplayers', methods=['POST'])
def nearby_players():
    data = request.get_json(silent=True) or {}
    _require(data, 'userName', 'password', 'lat', 'lon', 'distance')
    players = get_game().matcher.find_nearby(
        data['userName'],
        data['password'],
        data['lon'],
        data['lat'],
        data['distance'],
    )
    return jsonify([p.to_dict() for p in players])


@game.route('/getPostIfReached', methods=['POST'])
def get_post_if_reached():
    data = request.get_json(silent=True) or {}
    _require(data, 'postId', 'lat', 'lon')
    post = get_game().reachability.check_reached(data['postId'], data['lat'], data['lon'])
    return jsonify(post.to_dict())


@game.route('/posts', methods=['POST'])
@admin_required
def create_post():
    data = request.get_json(silent=True) or {}
    _require(data, 'postId', 'task', 'lat', 'lon')
    post = get_game().reachability.add_post(
        data['postId'],
        data['task'],
        bool(data.get('isUrl', False)),
        data.get('taskSolution'),
        data['lat'],
        data['lon'],
    )
    return jsonify(post.to_dict()), 201
