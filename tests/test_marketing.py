from http import HTTPStatus

import pytest

from vending_admin.application.marketing.use_cases import render_placeholders


def template_payload(**overrides):
    payload = {
        'templateId': 'quote_follow_up',
        'name': 'Quote follow-up',
        'category': 'customer',
        'subject': 'Your quote for [company]',
        'body': '<p>Hi [first_name], thanks for contacting AMP Vending.</p>',
        'variables': ['company', 'first_name'],
    }
    payload.update(overrides)
    return payload


def campaign_payload(**overrides):
    payload = {
        'name': 'Spring promo',
        'headline': 'Before you go...',
        'subheadline': 'Free vending machine for your office',
        'benefits': ['Free installation', 'Weekly restocking'],
        'stats': [{'value': '24/7', 'label': 'Service'}],
    }
    payload.update(overrides)
    return payload


# --- Templates de e-mail ---


def test_email_template_lifecycle(client, auth_headers, create_admin):
    author = create_admin('marketing@ampvending.test')
    headers = auth_headers('admin', user_id=str(author.id))

    created = client.post('/admin/marketing/email-templates', json=template_payload(), headers=headers)
    assert created.status_code == HTTPStatus.CREATED
    assert created.json()['message'] == 'Email template created successfully'
    template = created.json()['data']
    assert template['is_active'] is True
    assert template['is_default'] is False
    assert template['usage_count'] == 0
    assert template['created_by'] == str(author.id)

    updated = client.patch(
        f"/admin/marketing/email-templates/{template['id']}",
        json={'subject': 'Quote for [company]'},
        headers=headers,
    )
    assert updated.status_code == HTTPStatus.OK
    assert updated.json()['data']['subject'] == 'Quote for [company]'
    assert client.get(f"/admin/marketing/email-templates/{template['id']}", headers=headers).json()['data'] == updated.json()['data']

    deleted = client.delete(f"/admin/marketing/email-templates/{template['id']}", headers=headers)
    assert deleted.json()['message'] == 'Email template deleted successfully'
    missing = client.get(f"/admin/marketing/email-templates/{template['id']}", headers=headers)
    assert missing.status_code == HTTPStatus.NOT_FOUND
    assert missing.json()['error'] == 'Email template not found'

    activity = client.get('/admin/activity', params={'resourceType': 'email_template'}, headers=headers).json()['data']
    assert [entry['action_type'] for entry in activity] == ['delete', 'update', 'create']
    assert activity[2]['new_values'] == {'template_id': 'quote_follow_up', 'name': 'Quote follow-up', 'category': 'customer'}
    assert activity[1]['old_values'] == {'subject': 'Your quote for [company]'}
    assert activity[0]['summary'] == f"Deleted email template #{template['id'][:8]}"


def test_email_template_id_is_unique_and_validated(client, auth_headers):
    headers = auth_headers('admin')
    client.post('/admin/marketing/email-templates', json=template_payload(), headers=headers)

    duplicate = client.post('/admin/marketing/email-templates', json=template_payload(name='Copy'), headers=headers)
    assert duplicate.status_code == HTTPStatus.CONFLICT
    assert duplicate.json()['error'] == 'A template with this ID already exists'

    invalid = client.post(
        '/admin/marketing/email-templates',
        json=template_payload(templateId='Quote Follow Up', category='newsletter', subject=''),
        headers=headers,
    )
    assert invalid.status_code == HTTPStatus.BAD_REQUEST
    assert {detail['field'] for detail in invalid.json()['details']} == {'templateId', 'category', 'subject'}


def test_default_template_cannot_be_deleted(client, auth_headers):
    headers = auth_headers('admin')
    template = client.post(
        '/admin/marketing/email-templates',
        json=template_payload(isDefault=True),
        headers=headers,
    ).json()['data']

    response = client.delete(f"/admin/marketing/email-templates/{template['id']}", headers=headers)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {'success': False, 'error': 'Cannot delete default template', 'code': 'VALIDATION_FAILED'}
    assert client.get(f"/admin/marketing/email-templates/{template['id']}", headers=headers).status_code == HTTPStatus.OK


def test_email_template_filters(client, auth_headers):
    headers = auth_headers('admin')
    client.post('/admin/marketing/email-templates', json=template_payload(), headers=headers)
    client.post(
        '/admin/marketing/email-templates',
        json=template_payload(templateId='lead_alert', name='Lead alert', category='internal', isActive=False),
        headers=headers,
    )

    internal = client.get('/admin/marketing/email-templates', params={'category': 'internal'}, headers=headers).json()
    active = client.get('/admin/marketing/email-templates', params={'active': 'true'}, headers=headers).json()
    searched = client.get('/admin/marketing/email-templates', params={'search': 'lead'}, headers=headers).json()

    assert [item['template_id'] for item in internal['data']] == ['lead_alert']
    assert [item['template_id'] for item in active['data']] == ['quote_follow_up']
    assert searched['pagination']['total'] == 1


def test_public_active_templates_map(client, create_email_template):
    create_email_template('welcome', subject='Welcome!', body='<p>Hi [name]</p>', variables=['name'])
    create_email_template('retired', is_active=False)
    create_email_template('follow_up', subject='Following up')

    response = client.get('/marketing/email-templates/active')

    assert response.status_code == HTTPStatus.OK
    data = response.json()['data']
    assert list(data) == ['follow_up', 'welcome']
    assert data['welcome'] == {'name': 'welcome', 'subject': 'Welcome!', 'body': '<p>Hi [name]</p>', 'variables': ['name']}


def test_render_template_escapes_values_and_counts_usage(client, auth_headers):
    headers = auth_headers('admin')
    template = client.post('/admin/marketing/email-templates', json=template_payload(), headers=headers).json()['data']

    response = client.post(
        f"/admin/marketing/email-templates/{template['id']}/render",
        json={'variables': {'company': 'Acme & Sons', 'first_name': '<b>Jane</b>'}},
        headers=headers,
    )

    assert response.status_code == HTTPStatus.OK
    rendered = response.json()['data']
    assert rendered['subject'] == 'Your quote for Acme &amp; Sons'
    assert rendered['body'] == '<p>Hi &lt;b&gt;Jane&lt;/b&gt;, thanks for contacting AMP Vending.</p>'
    fetched = client.get(f"/admin/marketing/email-templates/{template['id']}", headers=headers).json()['data']
    assert fetched['usage_count'] == 1


def test_render_inactive_template_is_rejected(client, auth_headers):
    headers = auth_headers('admin')
    template = client.post(
        '/admin/marketing/email-templates',
        json=template_payload(isActive=False),
        headers=headers,
    ).json()['data']

    response = client.post(f"/admin/marketing/email-templates/{template['id']}/render", json={}, headers=headers)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()['error'] == 'Template is inactive'


def test_render_placeholders_leaves_unknown_keys():
    text = render_placeholders('[greeting], [name]! [unknown]', {'greeting': 'Hello', 'name': "O'Brien"})

    assert text == 'Hello, O&#x27;Brien! [unknown]'


# --- Exit intent ---


def test_public_exit_intent_falls_back_to_default_content(client):
    response = client.get('/marketing/exit-intent/active')

    assert response.status_code == HTTPStatus.OK
    popup = response.json()['data']
    assert popup['campaign_id'] is None
    assert popup['headline'] == "Wait! Don't Miss Out..."
    assert popup['special_offer_badge'] == 'LIMITED TIME OFFER'
    assert popup['stats'][0] == {'value': '100% Free', 'label': 'Setup'}
    assert popup['phone_number'] == '+12094035450'


def test_activating_a_campaign_deactivates_the_others(client, auth_headers):
    headers = auth_headers('editor')
    first = client.post('/admin/marketing/exit-intent', json=campaign_payload(isActive=True), headers=headers).json()['data']
    second = client.post('/admin/marketing/exit-intent', json=campaign_payload(name='Summer promo'), headers=headers).json()['data']
    assert first['is_active'] is True
    assert second['is_active'] is False
    assert second['primary_cta_text'] == 'Get Your Free Machine'

    switched = client.patch(f"/admin/marketing/exit-intent/{second['id']}", json={'isActive': True}, headers=headers)
    assert switched.status_code == HTTPStatus.OK
    assert switched.json()['data']['is_active'] is True

    active = client.get('/admin/marketing/exit-intent', params={'active': 'true'}, headers=headers).json()
    assert [item['id'] for item in active['data']] == [second['id']]
    assert client.get(f"/admin/marketing/exit-intent/{first['id']}", headers=headers).json()['data']['is_active'] is False

    third = client.post(
        '/admin/marketing/exit-intent',
        json=campaign_payload(name='Fall promo', isActive=True),
        headers=headers,
    ).json()['data']
    active = client.get('/admin/marketing/exit-intent', params={'active': 'true'}, headers=headers).json()
    assert [item['id'] for item in active['data']] == [third['id']]


def test_public_exit_intent_serves_active_campaign_and_records_use(client, auth_headers):
    headers = auth_headers('admin')
    campaign = client.post(
        '/admin/marketing/exit-intent',
        json=campaign_payload(isActive=True, specialOfferBadge='THIS WEEK ONLY'),
        headers=headers,
    ).json()['data']
    assert campaign['last_used_at'] is None

    popup = client.get('/marketing/exit-intent/active').json()['data']

    assert popup['campaign_id'] == campaign['id']
    assert popup['headline'] == 'Before you go...'
    assert popup['special_offer_badge'] == 'THIS WEEK ONLY'
    assert 'name' not in popup
    stored = client.get(f"/admin/marketing/exit-intent/{campaign['id']}", headers=headers).json()['data']
    assert stored['last_used_at'] is not None


def test_deleting_the_active_campaign_restores_default_popup(client, auth_headers):
    headers = auth_headers('admin')
    campaign = client.post('/admin/marketing/exit-intent', json=campaign_payload(isActive=True), headers=headers).json()['data']

    deleted = client.delete(f"/admin/marketing/exit-intent/{campaign['id']}", headers=headers)

    assert deleted.json()['message'] == 'Exit intent campaign deleted successfully'
    assert client.get('/marketing/exit-intent/active').json()['data']['campaign_id'] is None
    activity = client.get('/admin/activity', params={'resourceType': 'exit_intent_campaign'}, headers=headers).json()['data']
    assert [entry['action_type'] for entry in activity] == ['delete', 'create']
    assert activity[0]['old_values'] == {'name': 'Spring promo', 'headline': 'Before you go...', 'is_active': True}


def test_exit_intent_validation(client, auth_headers):
    headers = auth_headers('admin')

    missing = client.post('/admin/marketing/exit-intent', json={'name': 'No copy'}, headers=headers)
    invalid = client.post(
        '/admin/marketing/exit-intent',
        json=campaign_payload(phoneNumber='call us', stats=[{'value': '24/7'}], benefits=['x'] * 11),
        headers=headers,
    )

    assert missing.status_code == HTTPStatus.BAD_REQUEST
    assert {detail['field'] for detail in missing.json()['details']} == {'headline', 'subheadline'}
    assert invalid.status_code == HTTPStatus.BAD_REQUEST
    fields = {detail['field'] for detail in invalid.json()['details']}
    assert {'phoneNumber', 'benefits'} <= fields
    assert any(field.startswith('stats') for field in fields)


def test_exit_intent_update_rejects_null_headline(client, auth_headers):
    headers = auth_headers('admin')
    campaign = client.post('/admin/marketing/exit-intent', json=campaign_payload(), headers=headers).json()['data']

    response = client.patch(f"/admin/marketing/exit-intent/{campaign['id']}", json={'headline': None}, headers=headers)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert [detail['field'] for detail in response.json()['details']] == ['headline']


# --- Permissões ---


@pytest.mark.parametrize(
    'method, path, payload',
    [
        ('delete', '/admin/marketing/email-templates/00000000-0000-0000-0000-0000000000ee', None),
        ('delete', '/admin/marketing/exit-intent/00000000-0000-0000-0000-0000000000ee', None),
        ('post', '/admin/marketing/email-templates/00000000-0000-0000-0000-0000000000ee/render', {}),
    ],
)
def test_editor_cannot_delete_or_render_marketing_content(client, auth_headers, method, path, payload):
    kwargs = {'headers': auth_headers('editor')}
    if payload is not None:
        kwargs['json'] = payload

    response = getattr(client, method)(path, **kwargs)

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json()['code'] == 'INSUFFICIENT_PERMISSIONS'


def test_marketing_admin_endpoints_require_authentication(client):
    for path in ('/admin/marketing/email-templates', '/admin/marketing/exit-intent'):
        assert client.get(path).status_code == HTTPStatus.UNAUTHORIZED, path
