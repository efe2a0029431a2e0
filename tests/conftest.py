import pytest
from sqlalchemy.pool import StaticPool

from portfolio import create_app, db
from portfolio.config import Config


class TestConfig(Config):
    __test__ = False

    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'poolclass': StaticPool,
        'connect_args': {'check_same_thread': False},
    }
    JWT_SECRET = 'test-jwt-secret-with-enough-length-for-hs256'
    JWT_EXPIRES_HOURS = 1
    LOG_LEVEL = 'WARNING'
    EXPOSE_ERROR_DETAILS = True
    CORS_ORIGINS = ['http://localhost:5173']


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(client):
    """Register a user; returns the ``{user, token}`` body plus ready-made auth headers."""

    def make(email='ada@example.com', password='secret1', name='Ada Lovelace', **extra):
        response = client.post(
            '/api/auth/register', json={'email': email, 'password': password, 'name': name, **extra}
        )
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        body['headers'] = {'Authorization': f"Bearer {body['token']}"}
        return body

    return make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def auth_headers(user):
    return user['headers']


@pytest.fixture
def other_user(make_user):
    return make_user(email='grace@example.com', name='Grace Hopper')
