from .rule_schema import (
    Rule, ColorGuide, RuleGroupBinding,
    VALID_OPERATORS, VALID_DATA_TYPES, VALID_BINDING_KINDS, DEFAULT_ADMIN_COLUMNS,
    BINDING_COLUMN, BINDING_TABLE, BINDING_STATUS_COLUMN,
)
from .rule_codec import encode_rules, decode_rules, EMPTY_RULE_LIST
from .rule_matcher import get_color_guide, resolve_data_type
from .rule_group import RuleGroup, column_rule_group, table_rule_group, status_column_rule_group
from .rule_executor import dataframe_to_rows, evaluate_rows, evaluate_table, summarize_guides

__all__ = [
    'Rule', 'ColorGuide', 'RuleGroupBinding',
    'VALID_OPERATORS', 'VALID_DATA_TYPES', 'VALID_BINDING_KINDS', 'DEFAULT_ADMIN_COLUMNS',
    'BINDING_COLUMN', 'BINDING_TABLE', 'BINDING_STATUS_COLUMN',
    'encode_rules', 'decode_rules', 'EMPTY_RULE_LIST',
    'get_color_guide', 'resolve_data_type',
    'RuleGroup', 'column_rule_group', 'table_rule_group', 'status_column_rule_group',
    'dataframe_to_rows', 'evaluate_rows', 'evaluate_table', 'summarize_guides',
]
