from flask import Blueprint, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the geogame server!'})

@main.route('/api/dummy')
def dummy():
    return jsonify({'msg': 'Hello'})
