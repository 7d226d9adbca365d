from datetime import datetime, timedelta, timezone
from http import HTTPStatus

import pytest
from pydantic import ValidationError
from sqlalchemy.dialects import postgresql as postgresql_dialect
from sqlalchemy.dialects import sqlite as sqlite_dialect

from vending_admin.infrastructure.db.query_builder import Page, build_list_query
from vending_admin.infrastructure.db.utils import UTCDateTime
from vending_admin.infrastructure.repositories.catalog_repository import PRODUCT_RESOURCE
from vending_admin.infrastructure.repositories.contact_repository import CONTACT_RESOURCE
from vending_admin.shared.errors import ValidationFailure
from vending_admin.shared.filters import ActivityFilters, ContactFilters, ProductFilters, parse_filters

from conftest import product_payload


def test_parse_filters_drops_empty_values_and_unknown_keys():
    filters = parse_filters(ProductFilters, {'category': 'chips', 'search': '  ', 'popular': '', 'sort': 'name'})

    assert filters.category == 'chips'
    assert filters.search is None
    assert filters.popular is None
    assert filters.limit == 100
    assert filters.offset == 0


def test_parse_filters_result_is_frozen():
    filters = parse_filters(ContactFilters, {'status': 'new'})

    with pytest.raises(ValidationError):
        filters.status = 'resolved'


def test_parse_filters_reports_every_invalid_field():
    with pytest.raises(ValidationFailure) as failure:
        parse_filters(ContactFilters, {'status': 'pending', 'assignedTo': 'nope', 'limit': '0', 'offset': '-1'})

    fields = sorted(detail['field'] for detail in failure.value.details)
    assert fields == ['assignedTo', 'limit', 'offset', 'status']


@pytest.mark.parametrize(
    'model, limit',
    [(ContactFilters, '101'), (ProductFilters, '201'), (ActivityFilters, '101')],
)
def test_parse_filters_never_clamps_limit(model, limit):
    with pytest.raises(ValidationFailure) as failure:
        parse_filters(model, {'limit': limit})

    assert failure.value.details[0]['field'] == 'limit'


def test_resource_limits_differ():
    assert parse_filters(ProductFilters, {'limit': '200'}).limit == 200
    assert parse_filters(ActivityFilters, {}).limit == 10


def test_build_list_query_is_deterministic():
    raw = {'category': 'chips', 'active': 'true', 'search': 'salt', 'limit': '5', 'offset': '10'}

    first = build_list_query(parse_filters(ProductFilters, raw), PRODUCT_RESOURCE)
    second = build_list_query(parse_filters(ProductFilters, dict(reversed(list(raw.items())))), PRODUCT_RESOURCE)

    for query in (first, second):
        assert query.limit == 5
        assert query.offset == 10
    assert str(first.statement) == str(second.statement)
    assert first.statement.compile().params == second.statement.compile().params
    assert str(first.count_statement) == str(second.count_statement)
    assert 'ORDER BY products.display_order ASC, products.name ASC, products.id ASC' in str(first.statement)


def test_search_term_wildcards_are_escaped():
    query = build_list_query(parse_filters(ContactFilters, {'search': '50%_off\\'}), CONTACT_RESOURCE)

    params = query.statement.compile().params
    assert '%50\\%\\_off\\\\%' in params.values()


def test_page_has_more():
    assert Page(items=[], total=5, limit=2, offset=2).has_more is True
    assert Page(items=[], total=5, limit=2, offset=3).has_more is False


def test_pagination_walks_every_item_once(client, auth_headers):
    headers = auth_headers('admin')
    for index in range(5):
        client.post('/admin/products', json=product_payload(f'product-{index}', displayOrder=index), headers=headers)

    seen = []
    offset = 0
    while True:
        response = client.get('/admin/products', params={'limit': 2, 'offset': offset}, headers=headers)
        assert response.status_code == HTTPStatus.OK
        body = response.json()
        pagination = body['pagination']
        assert pagination['total'] == 5
        assert len(body['data']) <= pagination['limit']
        assert pagination['hasMore'] == (pagination['offset'] + pagination['limit'] < pagination['total'])
        seen.extend(item['slug'] for item in body['data'])
        if not pagination['hasMore']:
            break
        offset += 2

    assert seen == [f'product-{index}' for index in range(5)]


def test_list_endpoint_rejects_out_of_range_limit(client, auth_headers):
    response = client.get('/admin/contacts', params={'limit': 500, 'status': 'bogus'}, headers=auth_headers('admin'))

    assert response.status_code == HTTPStatus.BAD_REQUEST
    body = response.json()
    assert body['success'] is False
    assert body['code'] == 'VALIDATION_FAILED'
    assert {detail['field'] for detail in body['details']} == {'limit', 'status'}


def test_search_filters_case_insensitively(client, auth_headers):
    headers = auth_headers('admin')
    client.post('/admin/products', json=product_payload('sea-salt-chips', name='Sea Salt Chips'), headers=headers)
    client.post('/admin/products', json=product_payload('dark-chocolate', name='Dark Chocolate', category='candy'), headers=headers)

    response = client.get('/admin/products', params={'search': 'SALT'}, headers=headers)

    assert [item['slug'] for item in response.json()['data']] == ['sea-salt-chips']


def test_utc_datetime_column_normalizes_to_aware_utc():
    column = UTCDateTime()
    sqlite, postgres = sqlite_dialect.dialect(), postgresql_dialect.dialect()
    local = datetime(2024, 5, 1, 9, 30, tzinfo=timezone(timedelta(hours=-7)))

    assert column.process_bind_param(local, sqlite) == datetime(2024, 5, 1, 16, 30)
    assert column.process_bind_param(local, postgres) == datetime(2024, 5, 1, 16, 30, tzinfo=timezone.utc)
    assert column.process_result_value(datetime(2024, 5, 1, 16, 30), sqlite) == local
    assert column.process_result_value(None, sqlite) is None
