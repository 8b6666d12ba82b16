import json

import pytest

from colorrules.errors import RuleDecodeError, RuleEncodeError
from colorrules.rule_engine import decode_rules, encode_rules

from conftest import make_rule


def test_empty_list_encodes_to_empty_array():
    assert encode_rules([]) == '[]'
    assert decode_rules('[]') == []


def test_round_trip_preserves_order_and_fields():
    rules = [
        make_rule('r2', element_key='name', operator='EQUAL', value='Ada', foreground='#00FF00'),
        make_rule('r1'),
    ]

    assert decode_rules(encode_rules(rules)) == rules


def test_encoded_form_uses_camel_case_keys():
    payload = json.loads(encode_rules([make_rule('r1')]))

    assert payload == [{
        'ruleId': 'r1',
        'elementKey': 'age',
        'operator': 'GREATER_THAN',
        'value': '30',
        'foreground': '#FF0000',
        'background': '#FFFFFF',
    }]


@pytest.mark.parametrize('text', [None, '', '   '])
def test_absent_or_blank_text_decodes_to_empty_list(text):
    assert decode_rules(text) == []


@pytest.mark.parametrize('text', [
    '{not json',
    '{"ruleId": "r1"}',
    '["r1"]',
    '[{"elementKey": "age", "operator": "EQUAL"}]',
    '[{"ruleId": "r1", "elementKey": "age", "operator": "LIKE", "value": "3"}]',
    '[{"ruleId": "r1", "elementKey": "age", "operator": ["EQUAL"], "value": "1"}]',
    '[{"ruleId": {"a": 1}, "elementKey": "age", "operator": "EQUAL", "value": "1"}]',
    '[{"ruleId": 5, "elementKey": "age", "operator": "EQUAL", "value": "1"}]',
    '[{"ruleId": "r1", "elementKey": ["age"], "operator": "EQUAL", "value": "1"}]',
])
def test_malformed_text_raises_decode_error(text):
    with pytest.raises(RuleDecodeError):
        decode_rules(text)


def test_duplicate_ids_raise_decode_error():
    text = encode_rules([make_rule('r1'), make_rule('r2')]).replace('"r2"', '"r1"')

    with pytest.raises(RuleDecodeError, match='repeats rule id'):
        decode_rules(text)


def test_unserializable_rule_raises_encode_error():
    with pytest.raises(RuleEncodeError):
        encode_rules([make_rule('r1', foreground=object())])
