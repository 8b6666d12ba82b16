"""
Applies a rule group to every row of a DataFrame.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .rule_group import RuleGroup
from .rule_matcher import get_color_guide
from .rule_schema import ColorGuide, Rule, DEFAULT_ADMIN_COLUMNS


def dataframe_to_rows(df: pd.DataFrame) -> List[Dict]:
    """Convert DataFrame to list of dicts with string column names."""
    df = df.rename(columns=str)
    return df.astype(object).where(pd.notnull(df), None).to_dict(orient='records')


def evaluate_rows(columns, rows: Iterable[Dict[str, Any]], rules: Sequence[Rule],
                  admin_columns: Iterable[str] = DEFAULT_ADMIN_COLUMNS) -> List[Optional[ColorGuide]]:
    """Return one color guide (or None) per row, in row order."""
    admin = frozenset(admin_columns)
    return [get_color_guide(columns, row, rules, admin) for row in rows]


def evaluate_table(group_or_rules, columns, df: pd.DataFrame) -> List[Optional[ColorGuide]]:
    """
    Evaluate a RuleGroup, or a plain sequence of rules, against every row of `df`.

    Columns are resolved per row while walking the rules, so
    UnresolvableColumnError is raised only when a row reaches an unknown
    column before any earlier rule matched. An empty frame never raises.
    """
    if isinstance(group_or_rules, RuleGroup):
        rules, admin_columns = group_or_rules.rules, group_or_rules.admin_columns
    else:
        rules, admin_columns = list(group_or_rules), DEFAULT_ADMIN_COLUMNS
    return evaluate_rows(columns, dataframe_to_rows(df), rules, admin_columns)


def summarize_guides(guides: Sequence[Optional[ColorGuide]]) -> Dict[str, int]:
    matched = sum(1 for g in guides if g is not None)
    return {
        'total': len(guides),
        'matched': matched,
        'unmatched': len(guides) - matched,
    }
