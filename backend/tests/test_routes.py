import io

import pandas as pd
import pytest

from app import create_app
from colorrules.routes import STORAGE_EXTENSION_KEY

BASE = '/api/color-rules/tables/census'


@pytest.fixture
def app():
    return create_app({
        'TESTING': True,
        'STORE_BACKEND': 'memory',
        'APP_NAME': 'test-app',
        'RATELIMIT_ENABLED': False,
    })


@pytest.fixture
def client(app):
    return app.test_client()


def _rule(element_key='age', operator='GREATER_THAN', value=30, **extra):
    return {'elementKey': element_key, 'operator': operator, 'value': value,
            'foreground': '#FF0000', 'background': '#FFFFFF', **extra}


def test_new_group_is_empty(client):
    resp = client.get(f'{BASE}/columns/age')

    assert resp.status_code == 200
    body = resp.get_json()
    assert body['kind'] == 'COLUMN'
    assert body['element_key'] == 'age'
    assert body['rules'] == []
    assert body['count'] == 0


def test_add_rule_generates_id_and_persists(client):
    resp = client.post(f'{BASE}/columns/age/rules', json=_rule())

    assert resp.status_code == 201
    rule_id = resp.get_json()['rule']['ruleId']
    assert rule_id

    rules = client.get(f'{BASE}/columns/age').get_json()['rules']
    assert [r['ruleId'] for r in rules] == [rule_id]
    assert rules[0]['value'] == '30'


def test_add_rule_with_bad_operator_is_rejected(client):
    resp = client.post(f'{BASE}/table/rules', json=_rule(operator='LIKE'))

    assert resp.status_code == 400
    assert 'Unknown operator' in resp.get_json()['error']


def test_add_rule_with_non_string_operator_is_rejected(client):
    resp = client.post(f'{BASE}/columns/age/rules', json=_rule(operator=['EQUAL']))

    assert resp.status_code == 400
    assert client.get(f'{BASE}/columns/age').get_json()['count'] == 0


def test_add_duplicate_rule_id_is_rejected(client):
    client.post(f'{BASE}/table/rules', json=_rule(ruleId='r1'))

    resp = client.post(f'{BASE}/table/rules', json=_rule(ruleId='r1'))

    assert resp.status_code == 400


def test_replace_group_keeps_given_order(client):
    resp = client.put(f'{BASE}/table', json={'rules': [
        _rule(ruleId='a', value=60),
        _rule(ruleId='b', value=30),
    ]})

    assert resp.status_code == 200
    assert [r['ruleId'] for r in resp.get_json()['rules']] == ['a', 'b']


def test_update_rule_in_place(client):
    client.put(f'{BASE}/table', json={'rules': [_rule(ruleId='a'), _rule(ruleId='b')]})

    resp = client.put(f'{BASE}/table/rules/a', json=_rule(value=99))

    assert resp.status_code == 200
    rules = client.get(f'{BASE}/table').get_json()['rules']
    assert [r['ruleId'] for r in rules] == ['a', 'b']
    assert rules[0]['value'] == '99'


def test_update_unknown_rule_is_404(client):
    resp = client.put(f'{BASE}/table/rules/missing', json=_rule())

    assert resp.status_code == 404


def test_delete_rule(client):
    client.put(f'{BASE}/status', json={'rules': [
        _rule(element_key='_sync_state', operator='EQUAL', value='in_conflict', ruleId='s1'),
    ]})

    resp = client.delete(f'{BASE}/status/rules/s1')

    assert resp.status_code == 200
    assert resp.get_json()['count'] == 0
    assert client.delete(f'{BASE}/status/rules/s1').status_code == 404


def test_emptied_group_leaves_no_stored_key(app, client):
    client.post(f'{BASE}/columns/age/rules', json=_rule(ruleId='r1'))
    store = app.extensions[STORAGE_EXTENSION_KEY].store
    assert len(store.keys('test-app')) == 1

    client.delete(f'{BASE}/columns/age')

    assert store.keys('test-app') == []


def test_evaluate_rows_with_inferred_columns(client):
    client.put(f'{BASE}/table', json={'rules': [_rule(ruleId='old', value=30)]})

    resp = client.post(f'{BASE}/table/evaluate', json={'rows': [{'age': 45}, {'age': 20}]})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body['guides'] == [{'foreground': '#FF0000', 'background': '#FFFFFF'}, None]
    assert body['summary'] == {'total': 2, 'matched': 1, 'unmatched': 1}


def test_evaluate_rows_with_explicit_columns(client):
    client.put(f'{BASE}/table', json={'rules': [_rule(ruleId='r1', operator='LESS_THAN', value=10)]})

    resp = client.post(f'{BASE}/table/evaluate', json={
        'rows': [{'age': '9'}],
        'columns': [{'element_key': 'age', 'data_type': 'string'}],
    })

    # '9' sorts after '10' as text
    assert resp.get_json()['guides'] == [None]


def test_evaluate_unknown_column_is_422(client):
    client.put(f'{BASE}/table', json={'rules': [_rule(ruleId='r1', element_key='height')]})

    resp = client.post(f'{BASE}/table/evaluate', json={'rows': [{'age': 45}]})

    assert resp.status_code == 422
    assert resp.get_json()['element_key'] == 'height'


def test_evaluate_requires_rows(client):
    assert client.post(f'{BASE}/table/evaluate', json={}).status_code == 400


def test_evaluate_file(client):
    client.put(f'{BASE}/table', json={'rules': [_rule(ruleId='r1', value=40)]})
    buf = io.BytesIO()
    pd.DataFrame({'name': ['Ada', 'Grace'], 'age': [36, 45]}).to_excel(buf, index=False, engine='openpyxl')
    buf.seek(0)

    resp = client.post(
        f'{BASE}/table/evaluate-file',
        data={'file': (buf, 'people.xlsx')},
        content_type='multipart/form-data',
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body['guides'] == [None, {'foreground': '#FF0000', 'background': '#FFFFFF'}]
    assert {c['element_key']: c['data_type'] for c in body['columns']} == {'name': 'string', 'age': 'integer'}


def test_evaluate_file_rejects_other_extensions(client):
    resp = client.post(
        f'{BASE}/table/evaluate-file',
        data={'file': (io.BytesIO(b'a,b'), 'people.csv')},
        content_type='multipart/form-data',
    )

    assert resp.status_code == 400


def test_metadata_endpoints(client):
    ops = client.get('/api/color-rules/operators').get_json()['operators']
    assert {'name': 'EQUAL', 'symbol': '='} in ops

    backends = client.get('/api/color-rules/store-backends').get_json()
    assert 'sqlite' in backends


def test_sqlite_backend_persists_across_apps(tmp_path):
    overrides = {'TESTING': True, 'STORE_BACKEND': 'sqlite', 'DB_PATH': str(tmp_path / 'rules.db'),
                 'APP_NAME': 'test-app', 'RATELIMIT_ENABLED': False}
    create_app(overrides).test_client().post(f'{BASE}/columns/age/rules', json=_rule(ruleId='r1'))

    rules = create_app(overrides).test_client().get(f'{BASE}/columns/age').get_json()['rules']

    assert [r['ruleId'] for r in rules] == ['r1']
