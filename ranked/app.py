import os
from flask import Flask, jsonify

from shared.pubsub import PubSubClient

from .authority import AuthorityRegistry, load_namespaces
from .config import config
from .entity_factory import EntityFactory
from .errors import RankedError
from .match_engine import MatchResolutionEngine
from .match_registry import MatchRegistry
from .models import db
from .rating_registry import RatingRegistry


def create_app(config_name: str = None) -> Flask:
    """Application factory for the ranking service."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Initialize extensions
    db.init_app(app)

    pubsub = None
    if app.config.get('REDIS_URL'):
        pubsub = PubSubClient.from_url(
            app.config['REDIS_URL'],
            log_size=app.config.get('EVENT_LOG_SIZE', 1000)
        )

    # Initialize services
    games = load_namespaces(app.config.get('GAMES', {}))
    factory = EntityFactory()
    authority = AuthorityRegistry(games, pubsub=pubsub)
    ratings = RatingRegistry(authority, factory=factory, pubsub=pubsub)
    matches = MatchRegistry(authority, factory=factory, pubsub=pubsub)

    # Create tables
    with app.app_context():
        db.create_all()

    # Store services on app for access in routes
    app.pubsub = pubsub
    app.games = games
    app.authority = authority
    app.ratings = ratings
    app.matches = matches
    app.engine = MatchResolutionEngine(authority, matches, ratings, pubsub=pubsub)

    register_error_handlers(app)
    register_health_routes(app)

    from .routes import ratings as ratings_routes
    app.register_blueprint(ratings_routes.bp)

    return app


def register_error_handlers(app: Flask):

    @app.errorhandler(RankedError)
    def handle_ranked_error(error: RankedError):
        return jsonify(error.to_dict()), error.status_code


def register_health_routes(app: Flask):

    @app.route('/health')
    def health_check():
        """Health check endpoint."""
        redis_ok = None
        if app.pubsub:
            try:
                app.pubsub.redis.ping()
                redis_ok = True
            except Exception:
                redis_ok = False

        try:
            db.session.execute(db.text('SELECT 1'))
            db_ok = True
        except Exception:
            db_ok = False

        status = 'healthy' if (db_ok and redis_ok is not False) else 'unhealthy'
        code = 200 if status == 'healthy' else 503

        return jsonify({
            'status': status,
            'redis': 'disabled' if redis_ok is None else ('connected' if redis_ok else 'disconnected'),
            'database': 'connected' if db_ok else 'disconnected'
        }), code
