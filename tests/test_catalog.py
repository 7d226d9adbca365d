from http import HTTPStatus

import pytest

from conftest import machine_payload, product_payload

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64


def _create_machine(client, headers, slug='premium-combo-machine', **overrides):
    response = client.post('/admin/machines', json=machine_payload(slug, **overrides), headers=headers)
    assert response.status_code == HTTPStatus.CREATED
    return response.json()['data']


def _upload(client, headers, machine_id, *, is_primary=None, content=PNG_BYTES, content_type='image/png'):
    data = {'alt_text': 'Front view', 'width': '800', 'height': '1200'}
    if is_primary is not None:
        data['is_primary'] = is_primary
    return client.post(
        f'/admin/machines/{machine_id}/images',
        files={'image': ('front.png', content, content_type)},
        data=data,
        headers=headers,
    )


def _primaries(client, headers, machine_id):
    images = client.get(f'/admin/machines/{machine_id}', headers=headers).json()['data']['images']
    return [image['id'] for image in images if image['is_primary']]


# --- Máquinas ---


def test_create_machine_returns_full_record(client, auth_headers):
    response = client.post('/admin/machines', json=machine_payload(), headers=auth_headers('editor'))

    assert response.status_code == HTTPStatus.CREATED
    body = response.json()
    assert body['message'] == 'Machine created successfully'
    machine = body['data']
    assert machine['slug'] == 'premium-combo-machine'
    assert machine['is_active'] is True
    assert machine['product_options'] == ['Snacks', 'Beverages']
    assert machine['specifications'][0]['items'][0] == {'label': 'Card reader', 'value': 'Yes'}
    assert machine['images'] == []


def test_create_machine_with_duplicate_slug_conflicts(client, auth_headers):
    headers = auth_headers('admin')
    _create_machine(client, headers)

    response = client.post('/admin/machines', json=machine_payload(), headers=headers)

    assert response.status_code == HTTPStatus.CONFLICT
    assert response.json() == {
        'success': False,
        'error': 'A machine with this slug already exists',
        'code': 'CONFLICT',
    }


def test_create_machine_validation(client, auth_headers):
    payload = machine_payload('Bad Slug!', category='frozen', shortDescription='too short', features=[])

    response = client.post('/admin/machines', json=payload, headers=auth_headers('admin'))

    assert response.status_code == HTTPStatus.BAD_REQUEST
    fields = {detail['field'] for detail in response.json()['details']}
    assert {'slug', 'category', 'shortDescription', 'features'} <= fields


def test_update_machine_records_changed_fields(client, auth_headers):
    headers = auth_headers('admin')
    machine = _create_machine(client, headers)

    response = client.patch(
        f"/admin/machines/{machine['id']}",
        json={'name': 'Premium Combo Machine XL', 'displayOrder': 3},
        headers=headers,
    )

    assert response.status_code == HTTPStatus.OK
    assert response.json()['data']['name'] == 'Premium Combo Machine XL'
    assert response.json()['data']['display_order'] == 3

    entry = client.get('/admin/activity', params={'resourceType': 'vending_machine', 'actionType': 'update'}, headers=headers).json()['data'][0]
    assert entry['old_values'] == {'name': 'Premium Combo Machine', 'display_order': 0}
    assert entry['new_values'] == {'name': 'Premium Combo Machine XL', 'display_order': 3}


def test_update_machine_rejects_slug_taken_by_another(client, auth_headers):
    headers = auth_headers('admin')
    _create_machine(client, headers)
    other = _create_machine(client, headers, 'glass-front-snack')

    response = client.patch(f"/admin/machines/{other['id']}", json={'slug': 'premium-combo-machine'}, headers=headers)

    assert response.status_code == HTTPStatus.CONFLICT


def test_delete_machine_is_soft_and_hides_it_from_the_public(client, auth_headers):
    headers = auth_headers('admin')
    machine = _create_machine(client, headers)
    _create_machine(client, headers, 'glass-front-snack', category='non-refrigerated')

    response = client.delete(f"/admin/machines/{machine['id']}", headers=headers)

    assert response.status_code == HTTPStatus.OK
    assert response.json()['data']['is_active'] is False
    assert client.get(f"/admin/machines/{machine['id']}", headers=headers).status_code == HTTPStatus.OK

    public = client.get('/vending-machines').json()
    assert [item['slug'] for item in public['data']] == ['glass-front-snack']
    assert public['pagination']['total'] == 1

    hidden = client.get('/vending-machines/premium-combo-machine')
    assert hidden.status_code == HTTPStatus.NOT_FOUND
    assert hidden.json()['error'] == 'Machine not found'
    assert client.get('/vending-machines/glass-front-snack').status_code == HTTPStatus.OK

    inactive = client.get('/admin/machines', params={'active': 'false'}, headers=headers).json()['data']
    assert [item['id'] for item in inactive] == [machine['id']]


def test_public_catalog_filters_by_category(client, auth_headers):
    headers = auth_headers('admin')
    _create_machine(client, headers)
    _create_machine(client, headers, 'glass-front-snack', category='non-refrigerated')

    response = client.get('/vending-machines', params={'category': 'non-refrigerated'})

    assert [item['slug'] for item in response.json()['data']] == ['glass-front-snack']


def test_editor_cannot_delete_machine(client, auth_headers):
    machine = _create_machine(client, auth_headers('admin'))

    response = client.delete(f"/admin/machines/{machine['id']}", headers=auth_headers('editor'))

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json()['code'] == 'INSUFFICIENT_PERMISSIONS'


def test_missing_machine_is_not_found(client, auth_headers):
    response = client.get('/admin/machines/00000000-0000-0000-0000-0000000000bb', headers=auth_headers('editor'))

    assert response.status_code == HTTPStatus.NOT_FOUND


# --- Imagens ---


def test_upload_image_stores_and_serves_the_file(client, auth_headers):
    headers = auth_headers('admin')
    machine = _create_machine(client, headers)

    response = _upload(client, headers, machine['id'], is_primary='true')

    assert response.status_code == HTTPStatus.CREATED
    image = response.json()['data']
    assert image['is_primary'] is True
    assert image['alt_text'] == 'Front view'
    assert image['content_type'] == 'image/png'
    assert image['file_size'] == len(PNG_BYTES)
    assert (image['width'], image['height']) == (800, 1200)
    assert image['image_url'].startswith('/media/machines/premium-combo-machine/')

    served = client.get(image['image_url'])
    assert served.status_code == HTTPStatus.OK
    assert served.content == PNG_BYTES


@pytest.mark.parametrize(
    'content, content_type',
    [(PNG_BYTES, 'application/pdf'), (b'', 'image/png'), (b'\x00' * (10 * 1024 * 1024 + 1), 'image/jpeg')],
)
def test_upload_image_rejects_bad_files(client, auth_headers, content, content_type):
    headers = auth_headers('admin')
    machine = _create_machine(client, headers)

    response = _upload(client, headers, machine['id'], content=content, content_type=content_type)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert [detail['field'] for detail in response.json()['details']] == ['image']


def test_upload_image_rejects_bad_form_fields(client, auth_headers):
    headers = auth_headers('admin')
    machine = _create_machine(client, headers)

    response = client.post(
        f"/admin/machines/{machine['id']}/images",
        files={'image': ('front.png', PNG_BYTES, 'image/png')},
        data={'display_order': '-2'},
        headers=headers,
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()['details'][0]['field'] == 'display_order'


def test_only_one_primary_image_per_machine(client, auth_headers):
    headers = auth_headers('admin')
    machine = _create_machine(client, headers)
    first = _upload(client, headers, machine['id'], is_primary='true').json()['data']
    second = _upload(client, headers, machine['id'], is_primary='true').json()['data']

    assert _primaries(client, headers, machine['id']) == [second['id']]

    response = client.patch(
        f"/admin/machines/{machine['id']}/images/set-primary",
        json={'imageId': first['id']},
        headers=headers,
    )

    assert response.status_code == HTTPStatus.OK
    assert response.json()['data']['id'] == first['id']
    assert _primaries(client, headers, machine['id']) == [first['id']]


def test_set_primary_for_image_of_another_machine_is_not_found(client, auth_headers):
    headers = auth_headers('admin')
    machine = _create_machine(client, headers)
    other = _create_machine(client, headers, 'glass-front-snack')
    foreign = _upload(client, headers, other['id']).json()['data']

    response = client.patch(
        f"/admin/machines/{machine['id']}/images/set-primary",
        json={'image_id': foreign['id']},
        headers=headers,
    )

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()['error'] == 'Image not found'


def test_delete_image_removes_record_and_file(client, auth_headers):
    headers = auth_headers('admin')
    machine = _create_machine(client, headers)
    image = _upload(client, headers, machine['id']).json()['data']

    response = client.delete(f"/admin/machines/{machine['id']}/images", params={'image_id': image['id']}, headers=headers)

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {'success': True}
    assert client.get(f"/admin/machines/{machine['id']}", headers=headers).json()['data']['images'] == []
    assert client.get(image['image_url']).status_code == HTTPStatus.NOT_FOUND

    again = client.delete(f"/admin/machines/{machine['id']}/images", params={'image_id': image['id']}, headers=headers)
    assert again.status_code == HTTPStatus.NOT_FOUND


# --- Produtos ---


def test_product_crud(client, auth_headers):
    headers = auth_headers('editor')

    created = client.post('/admin/products', json=product_payload(isPopular=True), headers=headers)
    assert created.status_code == HTTPStatus.CREATED
    product = created.json()['data']
    assert product['is_popular'] is True
    assert product['is_healthy'] is False

    fetched = client.get(f"/admin/products/{product['id']}", headers=headers).json()['data']
    assert fetched == product
    assert product['created_at'].endswith('Z')

    updated = client.patch(f"/admin/products/{product['id']}", json={'details': 'Sea salt, 1 oz'}, headers=headers)
    assert updated.json()['message'] == 'Product updated successfully'
    assert updated.json()['data']['details'] == 'Sea salt, 1 oz'

    assert client.delete(f"/admin/products/{product['id']}", headers=headers).status_code == HTTPStatus.FORBIDDEN
    deleted = client.delete(f"/admin/products/{product['id']}", headers=auth_headers('admin'))
    assert deleted.json()['data']['is_active'] is False


def test_product_validation_and_conflict(client, auth_headers):
    headers = auth_headers('admin')
    client.post('/admin/products', json=product_payload(), headers=headers)

    duplicate = client.post('/admin/products', json=product_payload(), headers=headers)
    assert duplicate.status_code == HTTPStatus.CONFLICT

    invalid = client.post(
        '/admin/products',
        json=product_payload('x', category='sandwiches', imageUrl='not a url'),
        headers=headers,
    )
    assert invalid.status_code == HTTPStatus.BAD_REQUEST
    assert {detail['field'] for detail in invalid.json()['details']} == {'slug', 'category', 'imageUrl'}


def test_product_filters(client, auth_headers):
    headers = auth_headers('admin')
    client.post('/admin/products', json=product_payload('trail-mix', name='Trail Mix', category='nuts', isHealthy=True), headers=headers)
    client.post('/admin/products', json=product_payload('cola', name='Cola', category='beverages', isPopular=True), headers=headers)

    healthy = client.get('/admin/products', params={'healthy': 'true'}, headers=headers).json()['data']
    popular = client.get('/admin/products', params={'popular': 'true', 'category': 'beverages'}, headers=headers).json()['data']

    assert [item['slug'] for item in healthy] == ['trail-mix']
    assert [item['slug'] for item in popular] == ['cola']


def test_bulk_update_products(client, auth_headers):
    headers = auth_headers('admin')
    first = client.post('/admin/products', json=product_payload('cola', name='Cola', category='beverages'), headers=headers).json()['data']
    second = client.post('/admin/products', json=product_payload('pretzels', name='Pretzels', category='snacks'), headers=headers).json()['data']

    response = client.patch(
        '/admin/products/bulk',
        json={
            'products': [
                {'id': first['id'], 'displayOrder': 2, 'isPopular': True},
                {'id': second['id'], 'displayOrder': 1, 'isActive': False},
                {'id': '00000000-0000-0000-0000-0000000000cc', 'displayOrder': 9},
            ]
        },
        headers=headers,
    )

    assert response.status_code == HTTPStatus.OK
    assert response.json()['message'] == '2 products updated successfully'

    listing = client.get('/admin/products', headers=headers).json()['data']
    assert [(item['slug'], item['display_order']) for item in listing] == [('pretzels', 1), ('cola', 2)]
    assert listing[0]['is_active'] is False
    assert listing[1]['is_popular'] is True


def test_bulk_update_requires_items(client, auth_headers):
    response = client.patch('/admin/products/bulk', json={'products': []}, headers=auth_headers('admin'))

    assert response.status_code == HTTPStatus.BAD_REQUEST
