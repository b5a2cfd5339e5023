from functools import wraps

from flask import current_app, jsonify
from flask_login import current_user, login_required

from geogame import db
from geogame.errors import AuthError, ForbiddenError


def register_auth(login_manager):
    # Flask-Login user loader
    @login_manager.user_loader
    def load_user(user_id):
        from geogame.models import User
        return db.session.get(User, int(user_id))

    # Admin endpoints authenticate with HTTP basic auth on every request
    @login_manager.request_loader
    def load_user_from_request(req):
        auth = req.authorization
        if auth is None or auth.type != 'basic' or not auth.username:
            return None
        identity = current_app.extensions['identity_store']
        try:
            return identity.verify_credentials(auth.username, auth.password)
        except AuthError:
            current_app.logger.warning(f"[auth-fail] basic user={auth.username}")
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        response = jsonify({'code': 401, 'message': 'Not Authenticated'})
        response.status_code = 401
        response.headers['WWW-Authenticate'] = 'Basic realm="geogame"'
        return response


def admin_required(view):
    @wraps(view)
    @login_required
    def wrapped(*args, **kwargs):
        if not current_user.is_admin:
            raise ForbiddenError()
        return view(*args, **kwargs)
    return wrapped
