from http import HTTPStatus

import pytest

from vending_admin.application.activity.use_cases import ActivityRecorder
from vending_admin.interfaces.api.dependencies import get_activity_recorder

from conftest import contact_payload, product_payload


# --- SEO ---


def test_seo_settings_lifecycle(client, auth_headers):
    headers = auth_headers('editor')

    created = client.post(
        '/admin/seo',
        json={'pagePath': '/vending-machines', 'title': 'Vending Machines', 'keywords': ['vending', 'snacks']},
        headers=headers,
    )
    assert created.status_code == HTTPStatus.CREATED
    setting = created.json()['data']
    assert setting['page_path'] == '/vending-machines'

    updated = client.patch(
        f"/admin/seo/{setting['id']}",
        json={'metaDescription': 'Refrigerated and snack vending machines for offices.', 'ogImage': 'https://ampvending.test/og.png'},
        headers=headers,
    )
    assert updated.status_code == HTTPStatus.OK
    assert updated.json()['data']['og_image'] == 'https://ampvending.test/og.png'
    assert updated.json()['data']['title'] == 'Vending Machines'

    listing = client.get('/admin/seo', params={'search': 'vending'}, headers=headers).json()
    assert listing['pagination']['total'] == 1


def test_seo_page_path_is_unique_and_validated(client, auth_headers):
    headers = auth_headers('admin')
    client.post('/admin/seo', json={'pagePath': '/'}, headers=headers)

    duplicate = client.post('/admin/seo', json={'pagePath': '/'}, headers=headers)
    assert duplicate.status_code == HTTPStatus.CONFLICT
    assert duplicate.json()['error'] == 'SEO settings for this page already exist'

    missing = client.post('/admin/seo', json={'title': 'Home'}, headers=headers)
    relative = client.post('/admin/seo', json={'pagePath': 'about', 'title': 'x' * 61}, headers=headers)
    assert missing.status_code == HTTPStatus.BAD_REQUEST
    assert [detail['field'] for detail in missing.json()['details']] == ['pagePath']
    assert {detail['field'] for detail in relative.json()['details']} == {'pagePath', 'title'}


def test_seo_update_cannot_clear_page_path(client, auth_headers):
    headers = auth_headers('admin')
    setting = client.post('/admin/seo', json={'pagePath': '/about'}, headers=headers).json()['data']

    response = client.patch(f"/admin/seo/{setting['id']}", json={'pagePath': None}, headers=headers)

    assert response.status_code == HTTPStatus.BAD_REQUEST


# --- Dados do negócio ---


def test_business_info_missing_row_is_not_found(client, auth_headers):
    response = client.get('/admin/business', headers=auth_headers('admin'))

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()['error'] == 'Business information not found'


def test_business_info_update(client, auth_headers, business_info):
    headers = auth_headers('admin')
    hours = {day: '8am-6pm' for day in ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')}

    response = client.patch(
        '/admin/business',
        json={'phone': '+1 (555) 010-2000', 'state': 'TX', 'zipCode': '75001', 'businessHours': hours},
        headers=headers,
    )

    assert response.status_code == HTTPStatus.OK
    info = response.json()['data']
    assert info['business_name'] == 'AMP Vending'
    assert info['state'] == 'TX'
    assert info['business_hours'] == hours
    assert client.get('/admin/business', headers=auth_headers('editor')).json()['data']['zip_code'] == '75001'


def test_business_info_validation(client, auth_headers, business_info):
    response = client.patch(
        '/admin/business',
        json={'state': 'Texas', 'zipCode': '7500', 'latitude': 120, 'businessName': None},
        headers=auth_headers('admin'),
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert {detail['field'] for detail in response.json()['details']} == {'state', 'zipCode', 'latitude', 'businessName'}


# --- E-mails ---


def test_send_email_logs_the_delivery(client, auth_headers, create_admin, notifier):
    sender = create_admin('ops@ampvending.test')
    headers = auth_headers('admin', user_id=str(sender.id))

    response = client.post(
        '/admin/emails/send',
        json={'to': 'customer@example.com', 'subject': 'Your quote', 'html': '<p>Hello</p>', 'templateUsed': 'quote'},
        headers=headers,
    )

    assert response.status_code == HTTPStatus.OK
    body = response.json()
    assert body['message'] == 'Email sent successfully'
    assert body['data']['messageId'] == notifier.sent[0]['message_id']
    assert notifier.sent[0]['recipients'] == ['customer@example.com']

    logs = client.get('/admin/emails/logs', headers=headers).json()
    assert logs['pagination']['total'] == 1
    log = logs['data'][0]
    assert log['id'] == body['data']['logId']
    assert log['status'] == 'sent'
    assert log['template_used'] == 'quote'
    assert log['admin_user_id'] == str(sender.id)


def test_send_email_failure_is_bad_gateway(client, auth_headers, notifier):
    notifier.fail = True
    headers = auth_headers('admin')

    response = client.post(
        '/admin/emails/send',
        json={'to': 'customer@example.com', 'subject': 'Your quote', 'html': '<p>Hello</p>'},
        headers=headers,
    )

    assert response.status_code == HTTPStatus.BAD_GATEWAY
    assert response.json() == {'success': False, 'error': 'Failed to send email', 'code': 'UPSTREAM_FAILURE'}
    assert client.get('/admin/emails/logs', headers=headers).json()['data'] == []


def test_contact_form_emails_are_not_written_to_email_logs(client, auth_headers):
    client.post('/contact', json=contact_payload())

    assert client.get('/admin/emails/logs', headers=auth_headers('admin')).json()['pagination']['total'] == 0


# --- Auditoria ---


def test_activity_feed_lists_newest_first_with_summary(client, auth_headers):
    headers = auth_headers('admin')
    product = client.post('/admin/products', json=product_payload(), headers=headers).json()['data']
    client.post('/admin/seo', json={'pagePath': '/products'}, headers=headers)

    feed = client.get('/admin/activity', headers=headers).json()

    assert feed['pagination'] == {'total': 2, 'limit': 10, 'offset': 0, 'hasMore': False}
    assert [entry['resource_type'] for entry in feed['data']] == ['seo_setting', 'product']
    assert feed['data'][1]['summary'] == f"Created product #{product['id'][:8]}"
    assert feed['data'][1]['user_agent'] == 'testclient'


class BrokenActivityRepository:
    async def add(self, entry):
        raise RuntimeError('activity table unavailable')


def test_activity_write_failure_does_not_fail_the_mutation(app, client, auth_headers):
    app.dependency_overrides[get_activity_recorder] = lambda: ActivityRecorder(BrokenActivityRepository())
    headers = auth_headers('admin')

    created = client.post('/admin/products', json=product_payload(), headers=headers)

    assert created.status_code == HTTPStatus.CREATED
    assert client.get(f"/admin/products/{created.json()['data']['id']}", headers=headers).status_code == HTTPStatus.OK


# --- Permissões ---


@pytest.mark.parametrize(
    'method, path, payload',
    [
        ('post', '/admin/emails/send', {'to': 'a@example.com', 'subject': 's', 'html': 'h'}),
        ('patch', '/admin/business', {'slogan': 'Snacks for all'}),
        ('delete', '/admin/products/00000000-0000-0000-0000-0000000000dd', None),
        ('patch', '/admin/contacts/00000000-0000-0000-0000-0000000000dd', {'status': 'archived'}),
    ],
)
def test_editor_capabilities_are_limited(client, auth_headers, method, path, payload):
    kwargs = {'headers': auth_headers('editor')}
    if payload is not None:
        kwargs['json'] = payload

    response = getattr(client, method)(path, **kwargs)

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json() == {
        'success': False,
        'error': 'Insufficient permissions',
        'code': 'INSUFFICIENT_PERMISSIONS',
    }


def test_unknown_role_is_forbidden(client, auth_headers):
    response = client.get('/admin/contacts', headers=auth_headers('viewer'))

    assert response.status_code == HTTPStatus.FORBIDDEN


def test_admin_endpoints_require_authentication(client):
    for path in ('/admin/contacts', '/admin/machines', '/admin/products', '/admin/seo', '/admin/business', '/admin/emails/logs', '/admin/activity'):
        response = client.get(path)
        assert response.status_code == HTTPStatus.UNAUTHORIZED, path
