import pytest
from flask import Flask
from repairdesk.errors import Forbidden
from repairdesk.models.work_order import WorkOrder
from repairdesk.services import orders as engine_svc
from repairdesk.utils.validation import now_ms
from tests.test_utils_seed import seed_admin, seed_technician, auth_headers, create_work_order
from tests.test_lifecycle_helpers import assert_transition, create_order_and_assert


def test_technician_cannot_create_order(app_context: Flask):
    client = app_context.test_client()
    tech = seed_technician()
    resp = client.post('/orders', json={'deviceModel': 'X', 'issueDescription': 'Y'}, headers=auth_headers(tech))
    assert resp.status_code == 403
    assert resp.get_json()['error']['status'] == 403


def test_admin_cannot_claim(app_context: Flask):
    client = app_context.test_client()
    admin = seed_admin()
    order = create_order_and_assert(client, auth_headers(admin))
    assert_transition(client, f"/orders/{order['id']}/claim", auth_headers(admin), 403)


def test_technician_cannot_return_order(app_context: Flask):
    client = app_context.test_client()
    admin = seed_admin()
    tech = seed_technician()
    order = create_work_order(admin.id, status=WorkOrder.STATUS_WORKING, technician=tech)
    assert_transition(client, f"/orders/{order.id}/return", auth_headers(tech), 403)


def test_create_requires_model_and_description(app_context: Flask):
    client = app_context.test_client()
    admin = seed_admin()
    resp = client.post('/orders', json={'deviceModel': '  ', 'issueDescription': 'no enciende'}, headers=auth_headers(admin))
    assert resp.status_code == 400
    assert 'deviceModel' in resp.get_json()['error']['detail']
    resp = client.post('/orders', json={'deviceModel': 'Redmi'}, headers=auth_headers(admin))
    assert resp.status_code == 400
    assert 'issueDescription' in resp.get_json()['error']['detail']


@pytest.mark.parametrize('status', [WorkOrder.STATUS_WORKING, WorkOrder.STATUS_FINISHED])
def test_claim_non_pending_is_already_claimed(app_context: Flask, status):
    client = app_context.test_client()
    admin = seed_admin()
    owner = seed_technician()
    other = seed_technician()
    order = create_work_order(admin.id, status=status, technician=owner)
    for caller in (owner, other):
        resp = client.post(f'/orders/{order.id}/claim', headers=auth_headers(caller))
        assert resp.status_code == 409
        assert resp.get_json()['error']['title'] == 'Already Claimed'
    # Loser never mutates the record
    body = client.get(f'/orders/{order.id}', headers=auth_headers(admin)).get_json()
    assert body['status'] == status
    assert body['assignedTechnicianId'] == owner.id


def test_finish_requires_working(app_context: Flask):
    client = app_context.test_client()
    admin = seed_admin()
    order = create_order_and_assert(client, auth_headers(admin))
    resp = client.post(f"/orders/{order['id']}/finish", headers=auth_headers(admin))
    assert resp.status_code == 409
    assert resp.get_json()['error']['title'] == 'Invalid Transition'


def test_return_pending_order_is_invalid(app_context: Flask):
    client = app_context.test_client()
    admin = seed_admin()
    order = create_order_and_assert(client, auth_headers(admin))
    assert_transition(client, f"/orders/{order['id']}/return", auth_headers(admin), 409)


def test_technician_cannot_finish_someone_elses_order(app_context: Flask):
    client = app_context.test_client()
    admin = seed_admin()
    owner = seed_technician()
    other = seed_technician()
    order = create_work_order(admin.id, status=WorkOrder.STATUS_WORKING, technician=owner)
    assert_transition(client, f"/orders/{order.id}/finish", auth_headers(other), 403)


def test_unknown_order_is_404(app_context: Flask):
    client = app_context.test_client()
    admin = seed_admin()
    tech = seed_technician()
    assert client.get('/orders/does-not-exist', headers=auth_headers(admin)).status_code == 404
    assert client.post('/orders/does-not-exist/claim', headers=auth_headers(tech)).status_code == 404
    assert client.post('/orders/does-not-exist/return', headers=auth_headers(admin)).status_code == 404


def test_missing_token_rejected(client):
    resp = client.get('/orders?status=pending')
    assert resp.status_code == 401


def test_technician_finishing_pending_order_is_invalid_transition(app_context: Flask):
    client = app_context.test_client()
    admin = seed_admin()
    tech = seed_technician()
    order = create_work_order(admin.id)
    resp = client.post(f'/orders/{order.id}/finish', headers=auth_headers(tech))
    assert resp.status_code == 409
    assert resp.get_json()['error']['title'] == 'Invalid Transition'


def test_finish_after_reassignment_is_forbidden(app_context: Flask):
    client = app_context.test_client()
    admin = seed_admin()
    first = seed_technician()
    second = seed_technician()
    order = create_work_order(admin.id, status=WorkOrder.STATUS_WORKING, technician=first)
    # The order moves to another technician while the first one still has it open
    engine_svc.return_to_pending(order.id)
    engine_svc.claim_order(order.id, second.id)
    with pytest.raises(Forbidden):
        engine_svc.finish_order(order.id, technician_id=first.id)
    assert_transition(client, f'/orders/{order.id}/finish', auth_headers(first), 403)
    stored = engine_svc.get_order(order.id)
    assert stored.status == WorkOrder.STATUS_WORKING
    assert stored.assigned_technician_id == second.id
    assert stored.date_finished is None
    assert_transition(client, f'/orders/{order.id}/finish', auth_headers(second), 200, WorkOrder.STATUS_FINISHED)


@pytest.mark.parametrize('payload', [
    {'deviceModel': 123, 'issueDescription': 'no enciende'},
    {'deviceModel': 'Redmi', 'issueDescription': ['no', 'enciende']},
    {'deviceModel': 'Redmi', 'issueDescription': 'no enciende', 'shelfLocation': 8},
    {'deviceModel': 'Redmi', 'issueDescription': 'no enciende', 'photoBase64': 123},
    {'deviceModel': 'Redmi', 'issueDescription': 'no enciende', 'photoUrl': {'u': 1}},
])
def test_create_rejects_non_string_fields(app_context: Flask, payload):
    client = app_context.test_client()
    admin = seed_admin()
    resp = client.post('/orders', json=payload, headers=auth_headers(admin))
    assert resp.status_code == 400, resp.get_json()
    assert 'must be a string' in resp.get_json()['error']['detail']


def test_edit_and_photo_upload_reject_non_string_fields(app_context: Flask):
    client = app_context.test_client()
    admin = seed_admin()
    order = create_order_and_assert(client, auth_headers(admin))
    for body in ({'deviceModel': 7}, {'shelfLocation': 7}, {'photoBase64': 7}):
        resp = client.patch(f"/orders/{order['id']}", json=body, headers=auth_headers(admin))
        assert resp.status_code == 400, body
    resp = client.post(f"/orders/{order['id']}/photo", json={'imageBase64': 123}, headers=auth_headers(admin))
    assert resp.status_code == 400


def test_claim_start_never_precedes_creation(app_context: Flask):
    admin = seed_admin()
    tech = seed_technician()
    # Order stamped by a server whose clock runs ahead
    order = create_work_order(admin.id, date_created=now_ms() + 3_600_000)
    claimed = engine_svc.claim_order(order.id, tech.id)
    assert claimed.date_started == order.date_created
    finished = engine_svc.finish_order(order.id, technician_id=tech.id)
    assert order.date_created <= finished.date_started <= finished.date_finished
