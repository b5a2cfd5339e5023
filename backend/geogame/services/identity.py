from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from geogame import db
from geogame.errors import AuthError, ConflictError, UserNotFoundError, ValidationError
from geogame.models import User


class IdentityStore:
    """User accounts and password checks."""

    def __init__(self, session):
        self._session = session

    def get_user(self, user_name):
        user = None
        if isinstance(user_name, str) and user_name:
            user = self._session.query(User).filter_by(username=user_name).first()
        if user is None:
            raise UserNotFoundError(f'User {user_name} not found')
        return user

    def verify_credentials(self, user_name, password):
        try:
            user = self.get_user(user_name)
        except UserNotFoundError:
            raise AuthError()
        if not user.check_password(password):
            raise AuthError()
        return user

    def add_user(self, name, user_name, password, role='user'):
        if not isinstance(user_name, str) or not user_name:
            raise ValidationError('userName must be a non-empty string')
        if not isinstance(password, str) or not password:
            raise ValidationError('password must be a non-empty string')
        if self._session.query(User).filter_by(username=user_name).first():
            raise ConflictError('Username already exists')
        user = User(name=name, username=user_name, role=role)
        user.set_password(password)
        self._session.add(user)
        try:
            self._session.commit()
        except IntegrityError:
            self._session.rollback()
            raise ConflictError('Username already exists')
        except SQLAlchemyError:
            self._session.rollback()
            raise
        current_app.logger.info(f"[user-add] user={user_name} role={role}")
        return user

    def all_users(self):
        return self._session.query(User).order_by(User.username).all()


def init_identity_store(app):
    store = IdentityStore(db.session)
    app.extensions['identity_store'] = store
    return store
