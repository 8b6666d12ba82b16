"""
Row matching: resolve each rule's column type and return the first matching color.
"""
import logging
from typing import Any, Dict, Iterable, Optional, Sequence

from ..errors import UnresolvableColumnError
from .rule_schema import ColorGuide, Rule, DATA_TYPE_STRING

logger = logging.getLogger(__name__)


def resolve_data_type(columns, element_key: str, admin_columns: Iterable[str]) -> str:
    """
    Return the data type of `element_key`.

    Schema columns use their declared type. Admin (metadata) columns have no
    definition and are compared as strings. Anything else raises
    UnresolvableColumnError.
    """
    definition = columns.get(element_key)
    if definition is not None:
        return definition.data_type
    if element_key in admin_columns:
        return DATA_TYPE_STRING
    raise UnresolvableColumnError(element_key)


def get_color_guide(columns, row: Dict[str, Any], rules: Sequence[Rule],
                    admin_columns: Iterable[str]) -> Optional[ColorGuide]:
    """
    Walk `rules` in priority order and return the color guide of the first match.

    `columns` is an OrderedColumns (anything with a `get(element_key)` returning
    a definition or None). Returns None when no rule matches.
    """
    admin = frozenset(admin_columns)
    for rule in rules:
        data_type = resolve_data_type(columns, rule.element_key, admin)
        if rule.matches(data_type, row):
            return rule.color_guide
    return None
