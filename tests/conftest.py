import pytest
import os
import tempfile
import uuid
from unittest.mock import MagicMock

import requests

# Force test configuration before the config module is imported
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), f'restaurant-test-{uuid.uuid4().hex[:8]}.db')
os.environ['DATABASE_URL'] = f'sqlite:///{TEST_DB_PATH}'
os.environ['CACHE_ENABLED'] = 'false'
os.environ['WTF_CSRF_ENABLED'] = 'false'

from restaurant import create_app
from restaurant.database import get_session, create_all, drop_all


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.Config')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['ORDER_BACKEND_URL'] = 'http://orders.test'
    yield app
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture(scope='function')
def session(app):
    """Create fresh tables and a database session for one test."""
    with app.app_context():
        create_all()
        db_session = get_session()
        yield db_session
        db_session.rollback()
        db_session.remove()
        drop_all()


@pytest.fixture(scope='function')
def client(app, session):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def fake_response():
    """Factory for a `requests.Response` stand-in."""
    def _make(json_data=None, status_code=200, text=''):
        response = MagicMock()
        response.status_code = status_code
        response.text = text
        response.content = b'{}' if json_data is not None else b''
        response.json.return_value = json_data
        if status_code >= 400:
            response.raise_for_status.side_effect = requests.HTTPError(
                f'{status_code} Error', response=response
            )
        else:
            response.raise_for_status.return_value = None
        return response
    return _make
