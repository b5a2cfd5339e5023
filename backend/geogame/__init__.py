from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=flask_app.config.get('CORS_ORIGINS') or [])

    # Store handle and game components live on the app, one set per app instance
    from geogame.services.spatial_store import init_spatial_store
    from geogame.services.identity import init_identity_store
    from geogame.services.game import init_game
    spatial_store = init_spatial_store(flask_app)
    identity_store = init_identity_store(flask_app)
    init_game(flask_app, spatial_store, identity_store)

    from geogame.auth import register_auth
    register_auth(login_manager)

    from geogame.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Import and register blueprints here
    from geogame.main import main
    flask_app.register_blueprint(main)

    from geogame.api.game import game
    flask_app.register_blueprint(game, url_prefix='/gameapi')

    from geogame.api.users import users
    flask_app.register_blueprint(users, url_prefix='/api/users')

    @flask_app.errorhandler(404)
    def endpoint_not_found(err):
        if request.path.startswith('/api') or request.path.startswith('/gameapi'):
            return jsonify({'code': 404, 'msg': 'this API does not contain this endpoint'}), 404
        return err

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from geogame.geo import latitude_inside, latitude_outside
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed three teams around the same spot plus an admin
            for n in (1, 2, 3):
                identity_store.add_user(f'Team{n}', f't{n}', 'secret', role='team')
            identity_store.add_user('Admin', 'admin', 'secret', role='admin')

            spatial_store.upsert_position('t1', 'Team1', 55.77, 12.48)
            spatial_store.upsert_position('t2', 'Team2', latitude_inside(55.77, 100), 12.48)
            spatial_store.upsert_position('t3', 'Team3', latitude_outside(55.77, 100), 12.48)
            spatial_store.add_post('Post1', '1+1', False, '2', 55.77, 12.49)

            print('Database has been reset and seeded!')

    @click.command('purge-positions')
    def purge_positions_command():
        """Deletes player positions older than the configured TTL."""
        with flask_app.app_context():
            removed = spatial_store.purge_expired()
            print(f'Purged {removed} expired position(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(purge_positions_command)

    return flask_app
