"""
Color rule schema using dataclasses (no pydantic dependency).
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .value_comparator import compare_values


# Element data types a column can resolve to
DATA_TYPE_STRING = 'string'
DATA_TYPE_INTEGER = 'integer'
DATA_TYPE_NUMBER = 'number'
DATA_TYPE_BOOLEAN = 'boolean'
DATA_TYPE_DATE = 'date'

VALID_DATA_TYPES = {
    DATA_TYPE_STRING, DATA_TYPE_INTEGER, DATA_TYPE_NUMBER, DATA_TYPE_BOOLEAN, DATA_TYPE_DATE,
    'array', 'object', 'rowpath', 'configpath',
}

# Operator name → symbol shown to users
VALID_OPERATORS = {
    'LESS_THAN': '<',
    'LESS_THAN_OR_EQUAL': '<=',
    'EQUAL': '=',
    'GREATER_THAN_OR_EQUAL': '>=',
    'GREATER_THAN': '>',
}

# Binding kinds of a rule group
BINDING_COLUMN = 'COLUMN'
BINDING_TABLE = 'TABLE'
BINDING_STATUS_COLUMN = 'STATUS_COLUMN'

VALID_BINDING_KINDS = {BINDING_COLUMN, BINDING_TABLE, BINDING_STATUS_COLUMN}

# Metadata columns every table carries; they have no column definition.
DEFAULT_ADMIN_COLUMNS = (
    '_id',
    '_row_etag',
    '_sync_state',
    '_conflict_type',
    '_default_access',
    '_row_owner',
    '_group_read_only',
    '_group_modify',
    '_group_privileged',
    '_form_id',
    '_locale',
    '_savepoint_type',
    '_savepoint_timestamp',
    '_savepoint_creator',
)

DEFAULT_FOREGROUND = '#000000'
DEFAULT_BACKGROUND = '#FFFFFF'


def _operator_holds(operator: str, comp: int) -> bool:
    if operator == 'LESS_THAN':
        return comp < 0
    if operator == 'LESS_THAN_OR_EQUAL':
        return comp <= 0
    if operator == 'EQUAL':
        return comp == 0
    if operator == 'GREATER_THAN_OR_EQUAL':
        return comp >= 0
    if operator == 'GREATER_THAN':
        return comp > 0
    raise ValueError(f"Unknown operator '{operator}'")


@dataclass(frozen=True)
class ColorGuide:
    foreground: str
    background: str

    def to_dict(self) -> Dict:
        return {'foreground': self.foreground, 'background': self.background}


@dataclass(frozen=True)
class Rule:
    """
    A single conditional-formatting rule.

    The rule compares the row value found at `element_key` against `value`
    using `operator`; the data type resolved by the matcher decides whether
    the comparison is numeric, date-based or textual.
    """
    rule_id: str
    element_key: str
    operator: str
    value: str
    foreground: str = DEFAULT_FOREGROUND
    background: str = DEFAULT_BACKGROUND

    def __post_init__(self):
        for name in ('rule_id', 'element_key', 'operator'):
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"Rule {name} must be a string, got {type(getattr(self, name)).__name__}")
        if self.operator not in VALID_OPERATORS:
            raise ValueError(f"Unknown operator '{self.operator}'. Valid: {sorted(VALID_OPERATORS)}")
        if not self.rule_id:
            raise ValueError("Rule requires a non-empty rule_id")
        if not self.element_key:
            raise ValueError("Rule requires a non-empty element_key")

    @classmethod
    def new(cls, element_key: str, operator: str, value: Any,
            foreground: str = DEFAULT_FOREGROUND, background: str = DEFAULT_BACKGROUND) -> 'Rule':
        """Build a rule with a freshly generated id."""
        return cls(
            rule_id=str(uuid.uuid4()),
            element_key=element_key,
            operator=operator,
            value=str(value),
            foreground=foreground,
            background=background,
        )

    @property
    def color_guide(self) -> ColorGuide:
        return ColorGuide(foreground=self.foreground, background=self.background)

    def matches(self, data_type: str, row: Dict[str, Any]) -> bool:
        """Return True if the row value at this rule's column satisfies the comparison."""
        row_value = row.get(self.element_key)
        comp = compare_values(data_type, row_value, self.value)
        if comp is None:
            return False
        return _operator_holds(self.operator, comp)

    def to_dict(self) -> Dict:
        return {
            'ruleId': self.rule_id,
            'elementKey': self.element_key,
            'operator': self.operator,
            'value': self.value,
            'foreground': self.foreground,
            'background': self.background,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> 'Rule':
        return cls(
            rule_id=d['ruleId'],
            element_key=d['elementKey'],
            operator=d['operator'],
            value=str(d.get('value', '')),
            foreground=d.get('foreground', DEFAULT_FOREGROUND),
            background=d.get('background', DEFAULT_BACKGROUND),
        )


@dataclass(frozen=True)
class RuleGroupBinding:
    """Which rule list a group addresses: one column, the whole table, or the status column."""
    kind: str
    table_id: str
    element_key: Optional[str] = field(default=None)

    def __post_init__(self):
        if self.kind not in VALID_BINDING_KINDS:
            raise ValueError(f"Unknown binding kind '{self.kind}'. Valid: {sorted(VALID_BINDING_KINDS)}")
        if not self.table_id:
            raise ValueError("Binding requires a non-empty table_id")
        if self.kind == BINDING_COLUMN and not self.element_key:
            raise ValueError("COLUMN binding requires an element_key")
        if self.kind != BINDING_COLUMN and self.element_key is not None:
            raise ValueError(f"{self.kind} binding does not take an element_key")

    @classmethod
    def for_column(cls, table_id: str, element_key: str) -> 'RuleGroupBinding':
        return cls(kind=BINDING_COLUMN, table_id=table_id, element_key=element_key)

    @classmethod
    def for_table(cls, table_id: str) -> 'RuleGroupBinding':
        return cls(kind=BINDING_TABLE, table_id=table_id)

    @classmethod
    def for_status_column(cls, table_id: str) -> 'RuleGroupBinding':
        return cls(kind=BINDING_STATUS_COLUMN, table_id=table_id)

    def to_dict(self) -> Dict:
        return {'kind': self.kind, 'table_id': self.table_id, 'element_key': self.element_key}
