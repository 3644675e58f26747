"""Shared pytest fixtures."""
import json

import pytest

from attendance_api import create_app, db
from attendance_api.models.user import User

SCHOOL_LAT = -8.1575
SCHOOL_LNG = 113.722778

# Headers of a phone on the school WiFi with a secure carrier
NETWORK_HEADERS = {
    'User-Agent': 'AttendanceApp/1.0 (Android 14)',
    'X-WiFi-SSID': 'JTI-3.01',
    'X-Carrier': 'telkomsel',
    'X-Network-Type': '4g',
}


@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Factory for persisted students."""
    counter = {'n': 0}

    def _make_user(email=None, password='password123', is_active=True, **fields):
        counter['n'] += 1
        user = User(
            email=email or f'student{counter["n"]}@example.com',
            name=fields.pop('name', f'Student {counter["n"]}'),
            nis=fields.pop('nis', f'{1000 + counter["n"]}'),
            kelas=fields.pop('kelas', 'XII RPL 1'),
            jurusan=fields.pop('jurusan', 'Rekayasa Perangkat Lunak'),
            is_active=is_active,
            **fields
        )
        user.set_password(password)
        user.save()
        return user

    return _make_user


@pytest.fixture
def sample_user(make_user):
    """Create sample user for testing."""
    return make_user(email='test@example.com')


@pytest.fixture
def auth_token(client, sample_user):
    response = client.post('/api/v1/auth/login', json={
        'email': 'test@example.com',
        'password': 'password123'
    })
    return json.loads(response.data)['data']['token']


@pytest.fixture
def auth_headers(auth_token):
    """Bearer token plus network headers that pass every gate."""
    headers = dict(NETWORK_HEADERS)
    headers['Authorization'] = f'Bearer {auth_token}'
    return headers


@pytest.fixture
def school_location():
    return {'latitude': SCHOOL_LAT, 'longitude': SCHOOL_LNG, 'address': 'Main gate'}
