import pytest

from colorrules.kv_store import InMemoryKeyValueStore, RuleStorage
from colorrules.rule_engine import Rule
from colorrules.table_schema import ColumnDefinition, OrderedColumns

APP_NAME = 'test-app'
TABLE_ID = 'census'


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def storage(store):
    return RuleStorage(store, APP_NAME)


@pytest.fixture
def columns():
    return OrderedColumns(TABLE_ID, [
        ColumnDefinition('name', 'Name', 'string'),
        ColumnDefinition('age', 'Age', 'integer'),
        ColumnDefinition('weight', 'Weight', 'number'),
        ColumnDefinition('visited_on', 'Visited On', 'date'),
        ColumnDefinition('active', 'Active', 'boolean'),
    ])


def make_rule(rule_id, element_key='age', operator='GREATER_THAN', value='30',
              foreground='#FF0000', background='#FFFFFF'):
    return Rule(rule_id=rule_id, element_key=element_key, operator=operator, value=value,
                foreground=foreground, background=background)
