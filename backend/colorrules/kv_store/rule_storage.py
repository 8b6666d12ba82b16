"""
Persists rule groups in the key-value store.

Each binding kind maps to one fixed location:

    COLUMN         ColumnColorRuleGroup / <element_key> / ColumnColorRuleGroup.ruleList
    TABLE          TableColorRuleGroup  / default       / TableColorRuleGroup.ruleList
    STATUS_COLUMN  TableColorRuleGroup  / default       / StatusColumn.ruleList
"""
import logging
from typing import List, NamedTuple, Sequence

from ..errors import RuleDecodeError, RuleEncodeError, RuleSaveError
from ..rule_engine.rule_codec import decode_rules, encode_rules
from ..rule_engine.rule_schema import (
    Rule, RuleGroupBinding, BINDING_COLUMN, BINDING_TABLE, BINDING_STATUS_COLUMN,
)
from .store import KeyValueStore

logger = logging.getLogger(__name__)

KVS_PARTITION_COLUMN = 'ColumnColorRuleGroup'
KVS_PARTITION_TABLE = 'TableColorRuleGroup'
KEY_COLOR_RULES_COLUMN = 'ColumnColorRuleGroup.ruleList'
KEY_COLOR_RULES_TABLE = 'TableColorRuleGroup.ruleList'
KEY_COLOR_RULES_STATUS_COLUMN = 'StatusColumn.ruleList'
TABLE_ASPECT = 'default'


class StorageLocation(NamedTuple):
    table_id: str
    partition: str
    aspect: str
    key: str


def storage_location(binding: RuleGroupBinding) -> StorageLocation:
    if binding.kind == BINDING_COLUMN:
        return StorageLocation(binding.table_id, KVS_PARTITION_COLUMN, binding.element_key, KEY_COLOR_RULES_COLUMN)
    if binding.kind == BINDING_TABLE:
        return StorageLocation(binding.table_id, KVS_PARTITION_TABLE, TABLE_ASPECT, KEY_COLOR_RULES_TABLE)
    if binding.kind == BINDING_STATUS_COLUMN:
        return StorageLocation(binding.table_id, KVS_PARTITION_TABLE, TABLE_ASPECT, KEY_COLOR_RULES_STATUS_COLUMN)
    raise ValueError(f"Unknown binding kind '{binding.kind}'")


class RuleStorage:
    """Reads and writes rule lists for bindings within one application scope."""

    def __init__(self, store: KeyValueStore, app_name: str):
        self.store = store
        self.app_name = app_name

    def read_rules(self, binding: RuleGroupBinding) -> List[Rule]:
        """
        Load the stored rules for `binding`.

        Nothing stored yields an empty list. Corrupt stored text is logged and
        also yields an empty list. Store failures propagate.
        """
        location = storage_location(binding)
        text = self.store.with_transaction(
            self.app_name, lambda handle: self.store.get_text(handle, *location)
        )
        try:
            return decode_rules(text)
        except RuleDecodeError as e:
            logger.error(f"Discarding unreadable rule list at {location.partition}/{location.aspect}"
                         f"/{location.key} for table '{binding.table_id}': {e}", exc_info=e)
            return []

    def write_rules(self, binding: RuleGroupBinding, rules: Sequence[Rule]) -> None:
        """
        Store `rules` for `binding` in a single transaction.

        An empty list removes the key rather than writing '[]'. If the list
        cannot be encoded the transaction is rolled back and RuleSaveError is raised.
        """
        location = storage_location(binding)
        with self.store.transaction(self.app_name) as handle:
            if not rules:
                self.store.remove_key(handle, *location)
                logger.info(f"Removed empty rule list {location.key} for table '{binding.table_id}'")
                return
            try:
                text = encode_rules(rules)
            except RuleEncodeError as e:
                logger.error(f"Could not save rule list {location.key} for table '{binding.table_id}': {e}")
                raise RuleSaveError(str(e)) from e
            self.store.set_text(handle, *location, text)
        logger.info(f"Saved {len(rules)} rule(s) to {location.key} for table '{binding.table_id}'")

    def delete_rules(self, binding: RuleGroupBinding) -> None:
        self.write_rules(binding, [])
