"""
Pytest configuration and fixtures for the ranking engine tests.
"""
import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Set testing environment before importing app
os.environ['FLASK_ENV'] = 'testing'

from ranked.addressing import normalize_address
from ranked.app import create_app
from ranked.models import db

ADMIN = '0xad'
GO_ADMIN = '0xbe'
OUTSIDER = '0xee'

PLAYER_A = normalize_address('0xa1')
PLAYER_B = normalize_address('0xa2')
PLAYER_C = normalize_address('0xb1')
PLAYER_D = normalize_address('0xb2')


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create database session for testing."""
    with app.app_context():
        # Clear all tables before each test
        db.session.remove()

        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


@pytest.fixture
def chess(app):
    return app.games['chess']


@pytest.fixture
def go(app):
    return app.games['go']


@pytest.fixture
def authority(app):
    return app.authority


@pytest.fixture
def ratings(app):
    return app.ratings


@pytest.fixture
def matches(app):
    return app.matches


@pytest.fixture
def engine(app):
    return app.engine


@pytest.fixture
def admin_cap(db_session, authority, chess):
    """Initialize the chess namespace and return its authority capability."""
    return authority.initialize(ADMIN, chess)


@pytest.fixture
def ready_game(admin_cap, ratings, matches):
    """Chess namespace with both registries created."""
    ratings.initialize_rating_registry(admin_cap)
    matches.initialize_match_registry(admin_cap)
    return admin_cap


@pytest.fixture
def mint_player(authority, ratings, chess):
    """Mint a rating record for a player in the chess namespace."""
    def mint(player, namespace=None):
        namespace = namespace or chess
        capability = authority.create_player_capability(player, namespace)
        return ratings.mint_rating_record(capability)
    return mint


@pytest.fixture
def four_players(ready_game, mint_player):
    for player in (PLAYER_A, PLAYER_B, PLAYER_C, PLAYER_D):
        mint_player(player)
    return [PLAYER_A, PLAYER_B, PLAYER_C, PLAYER_D]


@pytest.fixture
def mock_pubsub(mocker):
    """PubSubClient stand-in recording published events."""
    mock = mocker.MagicMock()
    mock.publish_game_event = mocker.MagicMock(return_value=True)
    return mock
