from flask import Blueprint, current_app, jsonify, request

from geogame.auth import admin_required
from geogame.errors import ValidationError

users = Blueprint('users', __name__)


def _identity():
    return current_app.extensions['identity_store']


@users.route('', methods=['POST'])
def add_user():
    data = request.get_json(silent=True) or {}
    if not data.get('userName') or not data.get('password'):
        raise ValidationError('Missing userName or password')
    user = _identity().add_user(data.get('name') or data['userName'], data['userName'], data['password'])
    return jsonify(user.to_dict()), 201


@users.route('', methods=['GET'])
@admin_required
def list_users():
    return jsonify([u.to_dict() for u in _identity().all_users()])


@users.route('/<string:user_name>', methods=['GET'])
@admin_required
def get_user(user_name):
    return jsonify(_identity().get_user(user_name).to_dict())
