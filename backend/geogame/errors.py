"""Domain errors and their JSON rendering.

Every error the game core raises on purpose is an ``ApiError`` carrying the
HTTP status the request layer should answer with. Anything else (database
connectivity, programming errors) is left to propagate.
"""

from flask import jsonify


class ApiError(Exception):
    error_code = 500

    def __init__(self, message, error_code=None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code

    def to_dict(self):
        return {'code': self.error_code, 'message': self.message}


class ValidationError(ApiError):
    error_code = 400


class NotReachedError(ApiError):
    """Post unknown or claimed location too far away. Callers cannot tell which."""
    error_code = 400

    def __init__(self, message='Post not reached'):
        super().__init__(message)


class AuthError(ApiError):
    error_code = 403

    def __init__(self, message='wrong username or password'):
        super().__init__(message)


class ForbiddenError(ApiError):
    error_code = 403

    def __init__(self, message='Not Authorized'):
        super().__init__(message)


class UserNotFoundError(ApiError):
    error_code = 404


class ConflictError(ApiError):
    error_code = 409


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return jsonify(err.to_dict()), err.error_code
