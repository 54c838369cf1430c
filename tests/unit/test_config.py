"""
Unit tests for configuration helpers and the application factory.
"""
import pytest
from ranked.app import create_app
from ranked.config import config, parse_games, TestingConfig


class TestParseGames:
    """Tests for parse_games."""

    def test_empty(self):
        assert parse_games('') == {}
        assert parse_games(None) == {}

    def test_pairs(self):
        assert parse_games('chess:0x1, go:0x2') == {'chess': '0x1', 'go': '0x2'}

    def test_trailing_comma(self):
        assert parse_games('chess:0x1,') == {'chess': '0x1'}

    @pytest.mark.parametrize('raw', ['chess', 'chess:', ':0x1'])
    def test_invalid_entry(self, raw):
        with pytest.raises(ValueError):
            parse_games(raw)


class TestConfigMapping:
    """Tests for the config mapping."""

    def test_known_names(self):
        assert set(config) == {'development', 'production', 'testing', 'default'}

    def test_testing_disables_redis(self):
        assert TestingConfig.REDIS_URL == ''
        assert TestingConfig.SQLALCHEMY_DATABASE_URI == 'sqlite:///:memory:'


class TestCreateApp:
    """Tests for the services wired by create_app."""

    def test_services_attached(self, app):
        assert app.pubsub is None
        assert set(app.games) == {'chess', 'go'}
        assert app.ratings.authority is app.authority
        assert app.matches.authority is app.authority
        assert app.engine.ratings is app.ratings

    def test_redis_enabled_when_configured(self, mocker):
        from_url = mocker.patch('shared.pubsub.redis.from_url')
        mocker.patch.object(TestingConfig, 'REDIS_URL', 'redis://localhost:6379')

        app = create_app('testing')

        from_url.assert_called_once()
        assert app.pubsub.redis is from_url.return_value
        assert app.authority.pubsub is app.pubsub
