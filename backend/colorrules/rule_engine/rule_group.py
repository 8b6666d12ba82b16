"""
A RuleGroup is the ordered list of color rules bound to a column, a table, or
the status column. The first rule in the list that matches a row decides its
colors.

Groups are loaded from and saved to a RuleStorage explicitly; mutations only
touch memory until save() is called.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .rule_matcher import get_color_guide
from .rule_schema import ColorGuide, Rule, RuleGroupBinding, DEFAULT_ADMIN_COLUMNS

logger = logging.getLogger(__name__)


def _check_unique_ids(rules: Sequence[Rule]):
    seen = set()
    for rule in rules:
        if rule.rule_id in seen:
            raise ValueError(f"Duplicate rule id '{rule.rule_id}'")
        seen.add(rule.rule_id)


class RuleGroup:
    def __init__(self, storage, binding: RuleGroupBinding, rules: Iterable[Rule] = (),
                 admin_columns: Iterable[str] = DEFAULT_ADMIN_COLUMNS):
        self.storage = storage
        self.binding = binding
        self.admin_columns: Tuple[str, ...] = tuple(admin_columns)
        self._rules: List[Rule] = list(rules)
        _check_unique_ids(self._rules)

    @classmethod
    def load(cls, storage, binding: RuleGroupBinding,
             admin_columns: Iterable[str] = DEFAULT_ADMIN_COLUMNS) -> 'RuleGroup':
        """Build a group from whatever `storage` holds for `binding` (possibly nothing)."""
        return cls(storage, binding, storage.read_rules(binding), admin_columns)

    @property
    def kind(self) -> str:
        return self.binding.kind

    @property
    def table_id(self) -> str:
        return self.binding.table_id

    @property
    def element_key(self) -> Optional[str]:
        return self.binding.element_key

    @property
    def rules(self) -> Tuple[Rule, ...]:
        """Snapshot of the rules in priority order."""
        return tuple(self._rules)

    def count(self) -> int:
        return len(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        for rule in self._rules:
            if rule.rule_id == rule_id:
                return rule
        return None

    def add_rule(self, rule: Rule) -> None:
        """Append `rule` at the lowest priority."""
        if self.get_rule(rule.rule_id) is not None:
            raise ValueError(f"Rule id '{rule.rule_id}' already exists in this group")
        self._rules.append(rule)

    def replace_all(self, new_rules: Iterable[Rule]) -> None:
        new_rules = list(new_rules)
        _check_unique_ids(new_rules)
        self._rules[:] = new_rules

    def update_rule(self, updated: Rule) -> bool:
        """Replace the rule with the same id in place. Returns False if no rule had that id."""
        for i, rule in enumerate(self._rules):
            if rule.rule_id == updated.rule_id:
                self._rules[i] = updated
                return True
        logger.warning(f"Tried to update rule '{updated.rule_id}' which matched no saved ids "
                       f"in {self.kind} group of table '{self.table_id}'")
        return False

    def remove_rule(self, target: Rule) -> bool:
        """Remove the first rule with the target's id. Returns False if none matched."""
        for i, rule in enumerate(self._rules):
            if rule.rule_id == target.rule_id:
                del self._rules[i]
                return True
        logger.warning(f"Tried to remove rule '{target.rule_id}' which matched no saved ids "
                       f"in {self.kind} group of table '{self.table_id}'")
        return False

    def get_color_guide(self, columns, row: Dict[str, Any]) -> Optional[ColorGuide]:
        return get_color_guide(columns, row, self.rules, self.admin_columns)

    def save(self) -> None:
        self.storage.write_rules(self.binding, self.rules)

    def to_dict(self) -> Dict:
        return {**self.binding.to_dict(), 'rules': [r.to_dict() for r in self._rules]}


def column_rule_group(storage, table_id: str, element_key: str,
                      admin_columns: Iterable[str] = DEFAULT_ADMIN_COLUMNS) -> RuleGroup:
    return RuleGroup.load(storage, RuleGroupBinding.for_column(table_id, element_key), admin_columns)


def table_rule_group(storage, table_id: str,
                     admin_columns: Iterable[str] = DEFAULT_ADMIN_COLUMNS) -> RuleGroup:
    return RuleGroup.load(storage, RuleGroupBinding.for_table(table_id), admin_columns)


def status_column_rule_group(storage, table_id: str,
                             admin_columns: Iterable[str] = DEFAULT_ADMIN_COLUMNS) -> RuleGroup:
    return RuleGroup.load(storage, RuleGroupBinding.for_status_column(table_id), admin_columns)
