from datetime import date

from salon.auth.jwt_handler import create_access_token
from salon.models.appointment import Appointment


def _auth(email: str) -> dict:
    return {'Authorization': f'Bearer {create_access_token(subject=email)}'}


def _book(client, email: str, **body):
    payload = {'date': '2026-01-05', 'time': '10:00'}
    payload.update(body)
    return client.post('/appointments', json=payload, headers=_auth(email))


def test_availability_returns_full_grid_for_empty_day(client, seeded) -> None:
    response = client.get(
        '/appointments/availability',
        params={'date': '2026-01-05', 'serviceId': seeded['haircut_id'], 'stylistId': 'any'},
    )

    assert response.status_code == 200
    slots = response.json()['availableSlots']
    assert slots[0] == '09:00'
    assert slots[-1] == '17:00'
    assert len(slots) == 17


def test_availability_requires_date_and_service(client) -> None:
    response = client.get('/appointments/availability', params={'date': '2026-01-05'})

    assert response.status_code == 400
    assert response.json()['detail'] == 'Date and service ID are required.'


def test_availability_rejects_malformed_date(client, seeded) -> None:
    response = client.get(
        '/appointments/availability',
        params={'date': '2026-02-31', 'serviceId': seeded['haircut_id']},
    )

    assert response.status_code == 400


def test_availability_returns_not_found_for_unknown_service(client) -> None:
    response = client.get('/appointments/availability', params={'date': '2026-01-05', 'serviceId': 999})

    assert response.status_code == 404
    assert response.json()['detail'] == 'Service not found.'


def test_create_appointment_requires_token(client, seeded) -> None:
    response = client.post('/appointments', json={'serviceId': seeded['haircut_id'], 'date': '2026-01-05', 'time': '10:00'})

    assert response.status_code in (401, 403)


def test_create_appointment_returns_created_record_and_sends_confirmation(client, app, seeded, fake_gateway) -> None:
    response = _book(
        client,
        'casey@example.com',
        serviceId=seeded['haircut_id'],
        stylistId=seeded['stylist_id'],
        notes='Short on the sides',
    )

    assert response.status_code == 201
    body = response.json()
    assert body['message'] == 'Appointment created successfully'
    appointment = body['appointment']
    assert appointment['status'] == 'scheduled'
    assert appointment['appointment_date'] == '2026-01-05'
    assert appointment['appointment_time'] == '10:00'
    assert appointment['customer_name'] == 'Casey'
    assert appointment['customer_email'] == 'casey@example.com'
    assert appointment['service_name'] == 'Haircut'
    assert appointment['stylist_name'] == 'Alex'
    assert appointment['day_before_reminder_sent'] is False

    assert [view.id for view in fake_gateway.confirmations] == [appointment['id']]
    db = app.state.session_factory()
    try:
        assert db.get(Appointment, appointment['id']).reminder_sent is True
    finally:
        db.close()


def test_create_appointment_succeeds_when_confirmation_fails(client, app, seeded, fake_gateway) -> None:
    fake_gateway.failing_ids.add(1)

    response = _book(client, 'casey@example.com', serviceId=seeded['haircut_id'])

    assert response.status_code == 201
    assert response.json()['appointment']['id'] == 1
    assert fake_gateway.confirmations == []


def test_create_appointment_returns_conflict_for_taken_slot(client, seeded) -> None:
    first = _book(client, 'casey@example.com', serviceId=seeded['coloring_id'], stylistId=str(seeded['stylist_id']))
    second = _book(
        client,
        'drew@example.com',
        serviceId=seeded['haircut_id'],
        stylistId=str(seeded['stylist_id']),
        time='11:00',
    )

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()['detail'] == 'This time slot is no longer available.'


def test_create_appointment_rejects_long_notes(client, seeded) -> None:
    response = _book(client, 'casey@example.com', serviceId=seeded['haircut_id'], notes='x' * 1001)

    assert response.status_code == 400
    assert 'Notes cannot exceed 1000 characters.' in response.json()['detail']


def test_create_appointment_requires_service_date_and_time(client, seeded) -> None:
    response = client.post('/appointments', json={'date': '2026-01-05'}, headers=_auth('casey@example.com'))

    assert response.status_code == 400
    assert response.json()['detail'] == 'Service, date, and time are required.'


def test_booked_slot_disappears_from_availability(client, seeded) -> None:
    _book(client, 'casey@example.com', serviceId=seeded['haircut_id'], stylistId=seeded['stylist_id'])

    response = client.get(
        '/appointments/availability',
        params={'date': '2026-01-05', 'serviceId': seeded['haircut_id'], 'stylistId': seeded['stylist_id']},
    )

    slots = response.json()['availableSlots']
    assert '09:00' in slots
    assert '09:30' not in slots
    assert '10:00' not in slots
    assert '10:30' not in slots
    assert '11:00' in slots


def test_my_appointments_are_most_recent_first(client, seeded) -> None:
    _book(client, 'casey@example.com', serviceId=seeded['haircut_id'], date='2026-01-05')
    _book(client, 'casey@example.com', serviceId=seeded['haircut_id'], date='2026-01-07')
    _book(client, 'drew@example.com', serviceId=seeded['haircut_id'], date='2026-01-06')

    response = client.get('/appointments/mine', headers=_auth('casey@example.com'))

    assert response.status_code == 200
    assert [appointment['appointment_date'] for appointment in response.json()] == ['2026-01-07', '2026-01-05']


def test_staff_appointments_forbidden_for_customers(client, seeded) -> None:
    response = client.get('/appointments/staff', headers=_auth('casey@example.com'))

    assert response.status_code == 403


def test_staff_appointments_scoped_for_stylist_and_complete_for_admin(client, seeded) -> None:
    _book(client, 'casey@example.com', serviceId=seeded['haircut_id'], stylistId=seeded['stylist_id'])
    _book(client, 'drew@example.com', serviceId=seeded['haircut_id'], date='2026-01-04')

    stylist_view = client.get('/appointments/staff', headers=_auth('alex@example.com'))
    admin_view = client.get('/appointments/staff', headers=_auth('admin@example.com'))

    assert [appointment['customer_name'] for appointment in stylist_view.json()] == ['Casey']
    assert [appointment['appointment_date'] for appointment in admin_view.json()] == ['2026-01-04', '2026-01-05']


def test_staff_appointments_without_profile_return_not_found(client, seeded) -> None:
    response = client.get('/appointments/staff', headers=_auth('robin@example.com'))

    assert response.status_code == 404
    assert response.json()['detail'] == 'Stylist profile not found.'


def test_update_appointment_applies_partial_fields(client, app, seeded) -> None:
    created = _book(client, 'casey@example.com', serviceId=seeded['haircut_id']).json()['appointment']

    response = client.put(
        f"/appointments/{created['id']}",
        json={'status': 'completed'},
        headers=_auth('admin@example.com'),
    )

    assert response.status_code == 200
    assert response.json() == {'message': 'Appointment updated successfully'}
    db = app.state.session_factory()
    try:
        stored = db.get(Appointment, created['id'])
        assert stored.status == 'completed'
        assert stored.appointment_time == '10:00'
        assert stored.appointment_date == date(2026, 1, 5)
    finally:
        db.close()


def test_update_appointment_requires_staff(client, seeded) -> None:
    created = _book(client, 'casey@example.com', serviceId=seeded['haircut_id']).json()['appointment']

    response = client.put(
        f"/appointments/{created['id']}",
        json={'status': 'cancelled'},
        headers=_auth('casey@example.com'),
    )

    assert response.status_code == 403


def test_update_appointment_returns_not_found_and_rejects_empty_body(client, seeded) -> None:
    missing = client.put('/appointments/999', json={'status': 'cancelled'}, headers=_auth('admin@example.com'))
    empty = client.put('/appointments/999', json={}, headers=_auth('admin@example.com'))

    assert missing.status_code == 404
    assert missing.json()['detail'] == 'Appointment not found.'
    assert empty.status_code == 400
    assert empty.json()['detail'] == 'No fields to update.'


def test_delete_appointment_removes_record(client, seeded) -> None:
    created = _book(client, 'casey@example.com', serviceId=seeded['haircut_id']).json()['appointment']

    deleted = client.delete(f"/appointments/{created['id']}", headers=_auth('admin@example.com'))
    missing = client.delete(f"/appointments/{created['id']}", headers=_auth('admin@example.com'))

    assert deleted.status_code == 200
    assert deleted.json() == {'message': 'Appointment deleted successfully'}
    assert missing.status_code == 404


def test_invalid_token_is_rejected(client, seeded) -> None:
    response = client.get('/appointments/mine', headers={'Authorization': 'Bearer not-a-token'})

    assert response.status_code == 401
    assert response.json()['detail'] == 'Invalid token'
