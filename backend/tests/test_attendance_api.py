"""Test attendance endpoints end to end through the gates."""
import json
from datetime import date, datetime, timedelta

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from attendance_api import db
from attendance_api.models.attendance import AttendanceRecord, AttendanceStatus

STATUSES = {'present', 'late', 'absent'}


def checkin(client, headers, body):
    return client.post('/api/v1/attendance/checkin', json=body, headers=headers)


def test_checkin_success(client, auth_headers, school_location):
    response = checkin(client, auth_headers, school_location)

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['message'] == 'Check in successful'
    assert data['data']['status'] in STATUSES
    assert data['data']['check_out'] is None
    assert data['data']['location']['address'] == 'Main gate'
    assert data['data']['user']['email'] == 'test@example.com'

    assert response.headers['X-Network-Security'] == 'validated'
    assert response.headers['X-Client-IP'] == '127.0.0.1'
    assert response.headers['X-Security-Level'] == 'high'
    assert response.headers['X-Frame-Options'] == 'DENY'
    assert response.headers['X-GPS-Required'] == 'true'
    assert response.headers.get('X-Request-ID')


def test_checkin_twice(client, auth_headers, school_location):
    checkin(client, auth_headers, school_location)
    response = checkin(client, auth_headers, school_location)

    assert response.status_code == 409
    assert json.loads(response.data)['message'] == 'Already checked in today'


def test_checkout_flow(client, auth_headers, school_location):
    response = client.post('/api/v1/attendance/checkout', json=school_location, headers=auth_headers)
    assert response.status_code == 409
    assert json.loads(response.data)['message'] == 'No check in record found for today'

    checkin(client, auth_headers, school_location)
    response = client.post('/api/v1/attendance/checkout', json=school_location, headers=auth_headers)
    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['check_out'] >= data['check_in']

    response = client.post('/api/v1/attendance/checkout', json=school_location, headers=auth_headers)
    assert response.status_code == 409
    assert json.loads(response.data)['message'] == 'Already checked out today'


def test_requires_token(client, school_location):
    response = client.post('/api/v1/attendance/checkin', json=school_location)
    assert response.status_code == 401


def test_requires_user_agent(client, auth_headers, school_location):
    headers = dict(auth_headers, **{'User-Agent': ''})
    response = checkin(client, headers, school_location)

    assert response.status_code == 400
    assert json.loads(response.data)['message'] == 'User-Agent header is required'


def test_invalid_body(client, auth_headers):
    response = client.post('/api/v1/attendance/checkin', data='not json', headers=auth_headers)
    assert response.status_code == 400
    assert json.loads(response.data)['message'] == 'Invalid request body'


def test_non_numeric_coordinates(client, auth_headers):
    response = checkin(client, auth_headers, {'latitude': '-8.1575', 'longitude': 113.722778})
    assert response.status_code == 400
    data = json.loads(response.data)
    assert data['message'] == 'Validation failed'
    assert 'latitude must be a number' in data['errors']


def test_out_of_range_coordinates(client, auth_headers):
    response = checkin(client, auth_headers, {'latitude': 95.0, 'longitude': 113.7})
    assert response.status_code == 400
    assert json.loads(response.data)['message'] == 'Invalid GPS coordinates'


def test_outside_country(client, auth_headers):
    response = checkin(client, auth_headers, {'latitude': 51.5074, 'longitude': -0.1278})
    assert response.status_code == 403
    assert json.loads(response.data)['message'] == 'Location must be within Indonesia'


def test_outside_school(client, auth_headers):
    response = checkin(client, auth_headers, {'latitude': -6.2088, 'longitude': 106.8456})
    assert response.status_code == 403
    assert json.loads(response.data)['message'] == 'Location is outside school area'
    assert AttendanceRecord.query.count() == 0


def test_wrong_wifi(client, auth_headers, school_location):
    headers = dict(auth_headers, **{'X-WiFi-SSID': 'RandomWifi'})
    response = checkin(client, headers, school_location)

    assert response.status_code == 403
    assert json.loads(response.data)['message'] == 'Access denied: Invalid WiFi network'


def test_insecure_carrier(client, auth_headers, school_location):
    headers = dict(auth_headers, **{'X-Network-Type': '3g'})
    response = checkin(client, headers, school_location)

    assert response.status_code == 403
    assert json.loads(response.data)['message'] == 'Access denied: Insecure cellular network'


def test_foreign_ip(client, auth_headers, school_location):
    headers = dict(auth_headers, **{'X-Forwarded-For': '8.8.8.8'})
    response = checkin(client, headers, school_location)

    assert response.status_code == 403
    assert json.loads(response.data)['message'] == 'Access denied: Invalid IP range'


def test_fake_gps_precision(client, auth_headers):
    response = checkin(client, auth_headers, {'latitude': -8.157500000001, 'longitude': 113.722778})
    assert response.status_code == 403
    assert json.loads(response.data)['message'] == 'Access denied: Fake GPS detected'


def test_mock_location_header(client, auth_headers, school_location):
    headers = dict(auth_headers, **{'X-Mock-Location': 'true'})
    response = checkin(client, headers, school_location)
    assert response.status_code == 403


def test_admin_override_bypasses_network_gate(client, auth_headers, school_location):
    headers = dict(auth_headers, **{
        'X-WiFi-SSID': 'RandomWifi',
        'X-Forwarded-For': '8.8.8.8',
        'X-Admin-Override': 'test-admin-override'
    })
    response = checkin(client, headers, school_location)

    assert response.status_code == 200
    assert response.headers['X-Network-Security'] == 'admin-bypassed'
    assert 'X-Security-Level' not in response.headers


def test_admin_override_keeps_geofence(client, auth_headers):
    headers = dict(auth_headers, **{'X-Admin-Override': 'test-admin-override'})
    response = checkin(client, headers, {'latitude': -6.2088, 'longitude': 106.8456})
    assert response.status_code == 403


def test_wrong_admin_key(client, auth_headers, school_location):
    headers = dict(auth_headers, **{
        'X-WiFi-SSID': 'RandomWifi',
        'X-Admin-Override': 'guess'
    })
    response = checkin(client, headers, school_location)
    assert response.status_code == 403


def test_today(client, auth_headers, school_location):
    response = client.get('/api/v1/attendance/today', headers=auth_headers)
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['message'] == 'No attendance record for today'
    assert 'data' not in data

    checkin(client, auth_headers, school_location)
    response = client.get('/api/v1/attendance/today', headers=auth_headers)
    data = json.loads(response.data)
    assert data['data']['status'] in STATUSES


def test_history_pagination(client, auth_headers, sample_user):
    for offset in range(5):
        day = date(2025, 6, 2) + timedelta(days=offset)
        db.session.add(AttendanceRecord(
            user_id=sample_user.id, date=day,
            check_in=datetime.combine(day, datetime.min.time()),
            status=AttendanceStatus.PRESENT, latitude=-8.1575, longitude=113.722778
        ))
    db.session.commit()

    response = client.get('/api/v1/attendance/history?page=1&limit=2', headers=auth_headers)
    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert [item['date'] for item in data['history']] == ['2025-06-06', '2025-06-05']
    assert data['pagination'] == {'page': 1, 'limit': 2, 'total': 5, 'total_pages': 3}

    response = client.get('/api/v1/attendance/history?page=0&limit=500', headers=auth_headers)
    data = json.loads(response.data)['data']
    assert data['pagination']['page'] == 1
    assert data['pagination']['limit'] == 10
    assert len(data['history']) == 5


def test_stats(client, auth_headers, sample_user):
    statuses = [AttendanceStatus.PRESENT] * 3 + [AttendanceStatus.LATE, AttendanceStatus.ABSENT]
    for offset, status in enumerate(statuses):
        day = date(2025, 6, 2) + timedelta(days=offset)
        db.session.add(AttendanceRecord(
            user_id=sample_user.id, date=day, status=status,
            latitude=-8.1575, longitude=113.722778
        ))
    db.session.commit()

    response = client.get('/api/v1/attendance/stats', headers=auth_headers)
    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['percentage'] == 60.0
    assert data['total_present'] == 3


def test_oversized_integer_coordinates(client, auth_headers):
    response = checkin(client, auth_headers, {'latitude': 10 ** 400, 'longitude': 113.722778})

    assert response.status_code == 400
    data = json.loads(response.data)
    assert data['message'] == 'Validation failed'
    assert data['errors'] == ['latitude must be a number']
    assert AttendanceRecord.query.count() == 0


def test_checkin_store_failure(client, auth_headers, school_location, monkeypatch):
    def failing_commit(self):
        raise OperationalError('INSERT INTO attendance_records', {}, Exception('server closed the connection'))

    monkeypatch.setattr(Session, 'commit', failing_commit)
    response = checkin(client, auth_headers, school_location)

    assert response.status_code == 503
    assert json.loads(response.data)['message'] == 'Service temporarily unavailable'
    assert b'server closed the connection' not in response.data
    assert b'INSERT' not in response.data


def test_preflight_without_user_agent(client):
    response = client.options('/api/v1/attendance/checkin', headers={
        'User-Agent': '',
        'Origin': 'http://localhost:3000',
        'Access-Control-Request-Method': 'POST'
    })
    assert response.status_code == 200
