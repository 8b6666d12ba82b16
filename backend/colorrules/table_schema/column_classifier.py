"""
Infers element data types (string/integer/number/boolean/date) from raw cell values.
"""
import re
from datetime import datetime, date
from typing import Any, List

from ..rule_engine.rule_schema import (
    DATA_TYPE_BOOLEAN, DATA_TYPE_DATE, DATA_TYPE_INTEGER, DATA_TYPE_NUMBER, DATA_TYPE_STRING,
)


DATE_PATTERNS = [
    r'^\d{1,2}[/-]\d{1,2}[/-]\d{2,4}$',
    r'^\d{4}[/-]\d{2}[/-]\d{2}$',
    r'^\d{1,2}\s+\w+\s+\d{4}$',
]

BOOLEAN_TEXT = {'true', 'false'}


def _is_date_value(val: Any) -> bool:
    if isinstance(val, (datetime, date)):
        return True
    if isinstance(val, str):
        for pattern in DATE_PATTERNS:
            if re.match(pattern, val.strip()):
                return True
    return False


def _is_boolean_value(val: Any) -> bool:
    if isinstance(val, bool):
        return True
    return isinstance(val, str) and val.strip().lower() in BOOLEAN_TEXT


def _is_integer_value(val: Any) -> bool:
    if isinstance(val, bool):
        return False
    if isinstance(val, int):
        return True
    if isinstance(val, float):
        return val.is_integer()
    if isinstance(val, str):
        return re.match(r'^-?\d+$', val.replace(',', '').strip()) is not None
    return False


def _is_numeric_value(val: Any) -> bool:
    if isinstance(val, bool):
        return False
    if isinstance(val, (int, float)):
        return True
    if isinstance(val, str):
        try:
            float(val.replace(',', '').strip())
            return True
        except ValueError:
            pass
    return False


def classify_column(values: List[Any]) -> str:
    """
    Classify a column's data type based on its non-null values.

    A type is chosen only when every non-null value agrees; mixed and empty
    columns are strings.
    """
    non_null = [v for v in values if v is not None and v != '']
    if not non_null:
        return DATA_TYPE_STRING

    if all(_is_boolean_value(v) for v in non_null):
        return DATA_TYPE_BOOLEAN
    if all(_is_date_value(v) for v in non_null):
        return DATA_TYPE_DATE
    if all(_is_integer_value(v) for v in non_null):
        return DATA_TYPE_INTEGER
    if all(_is_numeric_value(v) for v in non_null):
        return DATA_TYPE_NUMBER
    return DATA_TYPE_STRING
