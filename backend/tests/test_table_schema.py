from datetime import datetime

import pandas as pd
import pytest

from colorrules.table_schema import ColumnDefinition, OrderedColumns, classify_column


def test_find_and_get(columns):
    assert columns.find('age').data_type == 'integer'
    assert columns.get('height') is None
    with pytest.raises(KeyError):
        columns.find('height')


def test_iteration_keeps_declared_order(columns):
    assert columns.element_keys == ['name', 'age', 'weight', 'visited_on', 'active']
    assert 'age' in columns
    assert len(columns) == 5


def test_duplicate_columns_rejected():
    with pytest.raises(ValueError, match='Duplicate column'):
        OrderedColumns('t1', [ColumnDefinition('a', 'A'), ColumnDefinition('a', 'A again')])


def test_unknown_data_type_rejected():
    with pytest.raises(ValueError):
        ColumnDefinition('a', 'A', 'decimal')


def test_from_list_defaults():
    cols = OrderedColumns.from_list('t1', [{'element_key': 'a'}, {'element_key': 'b', 'data_type': 'number'}])

    assert cols.find('a').element_name == 'a'
    assert cols.find('a').data_type == 'string'
    assert cols.find('b').data_type == 'number'
    assert OrderedColumns.from_list('t1', cols.to_list()).to_list() == cols.to_list()


def test_from_dataframe_infers_types():
    df = pd.DataFrame({
        'name': ['Ada', 'Grace'],
        'age': [36, 45],
        'weight': [60.5, 70.25],
        'score': [1.0, None],
        'visited_on': pd.to_datetime(['2024-01-01', '2024-02-01']),
        'active': [True, False],
        'joined': ['2020-01-01', '2021-05-06'],
        '_sync_state': ['synced', 'synced'],
    })

    cols = OrderedColumns.from_dataframe('t1', df)

    assert {c.element_key: c.data_type for c in cols} == {
        'name': 'string',
        'age': 'integer',
        'weight': 'number',
        'score': 'integer',
        'visited_on': 'date',
        'active': 'boolean',
        'joined': 'date',
    }


@pytest.mark.parametrize('values, expected', [
    ([], 'string'),
    ([None, ''], 'string'),
    (['1', '2', '3,000'], 'integer'),
    (['1.5', 2], 'number'),
    (['true', 'FALSE'], 'boolean'),
    ([datetime(2024, 1, 1), '05/06/2024'], 'date'),
    (['1', 'apple'], 'string'),
])
def test_classify_column(values, expected):
    assert classify_column(values) == expected
