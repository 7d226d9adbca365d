from datetime import datetime, timedelta, timezone
from http import HTTPStatus

from conftest import contact_payload


def test_public_contact_is_stored_and_both_emails_sent(client, notifier, auth_headers):
    response = client.post('/contact', json=contact_payload())

    assert response.status_code == HTTPStatus.CREATED
    body = response.json()
    assert body['success'] is True
    assert body['emailStatus'] == {'customer': 'sent', 'business': 'sent'}
    assert [sent['kind'] for sent in notifier.sent] == ['confirmation', 'notification']
    assert notifier.sent[0]['recipients'] == ['jane.doe@example.com']

    stored = client.get(f"/admin/contacts/{body['data']['id']}", headers=auth_headers('admin')).json()['data']
    assert stored['status'] == 'new'
    assert stored['source'] == 'website_contact_form'
    assert stored['company_name'] == 'Acme Offices'


def test_public_contact_survives_email_failure(client, notifier, auth_headers):
    notifier.fail = True

    response = client.post('/contact', json=contact_payload())

    assert response.status_code == HTTPStatus.CREATED
    body = response.json()
    assert body['emailStatus'] == {'customer': 'failed', 'business': 'failed'}
    listing = client.get('/admin/contacts', headers=auth_headers('admin')).json()
    assert listing['pagination']['total'] == 1
    assert listing['data'][0]['id'] == body['data']['id']


def test_public_contact_validation_lists_fields(client):
    payload = contact_payload(firstName='', email='not-an-email', phone='call me', message='x' * 2001)

    response = client.post('/contact', json=payload)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    body = response.json()
    assert body['code'] == 'VALIDATION_FAILED'
    assert {detail['field'] for detail in body['details']} == {'firstName', 'email', 'phone', 'message'}


def test_contact_workflow_new_to_resolved(client, auth_headers, create_admin):
    owner = create_admin('sales@ampvending.test', password=None)
    headers = auth_headers('admin', user_id=str(owner.id))
    contact_id = client.post('/contact', json=contact_payload()).json()['data']['id']

    assigned = client.patch(
        f'/admin/contacts/{contact_id}',
        json={'status': 'in_progress', 'assignedTo': str(owner.id), 'notes': 'Called, waiting for floor plan'},
        headers=headers,
    )
    assert assigned.status_code == HTTPStatus.OK
    assert assigned.json()['data']['assigned_to'] == str(owner.id)
    assert assigned.json()['data']['resolved_at'] is None

    resolved = client.patch(f'/admin/contacts/{contact_id}', json={'status': 'resolved'}, headers=headers)
    assert resolved.json()['data']['status'] == 'resolved'
    assert resolved.json()['data']['resolved_at'] is not None

    filtered = client.get('/admin/contacts', params={'status': 'resolved'}, headers=headers).json()
    assert [item['id'] for item in filtered['data']] == [contact_id]
    assert client.get('/admin/contacts', params={'status': 'new'}, headers=headers).json()['data'] == []

    activity = client.get(
        '/admin/activity',
        params={'resourceType': 'contact_submission'},
        headers=headers,
    ).json()['data']
    assert [entry['action_type'] for entry in activity] == ['update', 'update']
    assert activity[0]['old_values'] == {'status': 'in_progress', 'resolved_at': None}
    assert activity[0]['new_values']['status'] == 'resolved'
    assert activity[0]['new_values']['resolved_at'] is not None
    assert activity[0]['admin_user_id'] == str(owner.id)
    assert activity[0]['summary'] == f'Updated contact #{contact_id[:8]}'


def test_contact_update_rejects_null_status_and_unknown_fields(client, auth_headers):
    contact_id = client.post('/contact', json=contact_payload()).json()['data']['id']

    response = client.patch(
        f'/admin/contacts/{contact_id}',
        json={'status': None, 'priority': 'high'},
        headers=auth_headers('admin'),
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert {detail['field'] for detail in response.json()['details']} == {'status', 'priority'}


def test_contact_search_and_missing_contact(client, auth_headers):
    headers = auth_headers('editor')
    globex = client.post('/contact', json=contact_payload(companyName='Globex Corp', email='hank@globex.example.com'))
    assert globex.status_code == HTTPStatus.CREATED
    client.post('/contact', json=contact_payload())

    found = client.get('/admin/contacts', params={'search': 'globex'}, headers=headers).json()
    assert [item['company_name'] for item in found['data']] == ['Globex Corp']

    missing = client.get('/admin/contacts/00000000-0000-0000-0000-0000000000aa', headers=headers)
    assert missing.status_code == HTTPStatus.NOT_FOUND
    assert missing.json() == {'success': False, 'error': 'Contact not found', 'code': 'NOT_FOUND'}


def test_editor_cannot_update_contacts(client, auth_headers):
    contact_id = client.post('/contact', json=contact_payload()).json()['data']['id']

    response = client.patch(f'/admin/contacts/{contact_id}', json={'status': 'archived'}, headers=auth_headers('editor'))

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json()['code'] == 'INSUFFICIENT_PERMISSIONS'


def test_contact_status_filter_paginates(client, auth_headers):
    headers = auth_headers('admin')
    ids = [
        client.post('/contact', json=contact_payload(email=f'lead{index}@example.com')).json()['data']['id']
        for index in range(8)
    ]
    for contact_id in ids[:3]:
        resolved = client.patch(f'/admin/contacts/{contact_id}', json={'status': 'resolved'}, headers=headers)
        assert resolved.status_code == HTTPStatus.OK

    response = client.get('/admin/contacts', params={'status': 'new', 'limit': 2, 'offset': 0}, headers=headers)

    assert response.status_code == HTTPStatus.OK
    body = response.json()
    assert len(body['data']) == 2
    assert {item['status'] for item in body['data']} == {'new'}
    assert body['pagination'] == {'total': 5, 'limit': 2, 'offset': 0, 'hasMore': True}

    last = client.get('/admin/contacts', params={'status': 'new', 'limit': 2, 'offset': 4}, headers=headers).json()
    assert len(last['data']) == 1
    assert last['pagination']['hasMore'] is False


def test_contact_date_range_filters(client, auth_headers):
    headers = auth_headers('admin')
    client.post('/contact', json=contact_payload())
    client.post('/contact', json=contact_payload(email='second@example.com'))
    yesterday = (datetime.now(timezone.utc) - timedelta(days=1)).strftime('%Y-%m-%dT%H:%M:%SZ')
    tomorrow = (datetime.now(timezone.utc) + timedelta(days=1)).strftime('%Y-%m-%dT%H:%M:%SZ')

    since = client.get('/admin/contacts', params={'dateFrom': yesterday}, headers=headers).json()
    until = client.get('/admin/contacts', params={'dateTo': yesterday}, headers=headers).json()
    window = client.get('/admin/contacts', params={'dateFrom': yesterday, 'dateTo': tomorrow}, headers=headers).json()

    assert since['pagination']['total'] == 2
    assert until['pagination']['total'] == 0
    assert until['data'] == []
    assert window['pagination']['total'] == 2


def test_contact_date_filter_must_be_a_timestamp(client, auth_headers):
    response = client.get('/admin/contacts', params={'dateFrom': 'yesterday'}, headers=auth_headers('admin'))

    assert response.status_code == HTTPStatus.BAD_REQUEST
    body = response.json()
    assert body['code'] == 'VALIDATION_FAILED'
    assert [detail['field'] for detail in body['details']] == ['dateFrom']
