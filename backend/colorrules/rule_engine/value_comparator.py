"""
Type-aware comparison of a row value against a rule operand.
"""
import logging
import math
from datetime import datetime, date, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

DATE_FORMATS = ('%Y-%m-%d', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M:%S',
                '%d/%m/%Y', '%d-%m-%Y', '%m/%d/%Y', '%d %b %Y')

_TRUE_TEXT = {'true', 't', 'yes', 'y', '1'}
_FALSE_TEXT = {'false', 'f', 'no', 'n', '0'}


def _is_missing(val: Any) -> bool:
    if val is None:
        return True
    if isinstance(val, float):
        return math.isnan(val)
    # pandas NaT is a datetime that never equals itself
    return isinstance(val, datetime) and val != val


def _normalize(val: Any) -> str:
    """Normalize a value to a comparable string."""
    if isinstance(val, float):
        if math.isinf(val):
            return str(val)
        if val == int(val):
            return str(int(val))
    if isinstance(val, (datetime, date)):
        return val.strftime('%Y-%m-%d')
    return str(val).strip()


def _parse_number(val: Any) -> Optional[float]:
    if isinstance(val, str):
        val = val.replace(',', '').strip()
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def _naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _parse_date(val: Any) -> Optional[datetime]:
    """Parse to a naive datetime; aware values are shifted to UTC first."""
    if isinstance(val, datetime):
        return _naive_utc(val)
    if isinstance(val, date):
        return datetime(val.year, val.month, val.day)
    if isinstance(val, str) and val.strip():
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(val.strip(), fmt)
            except ValueError:
                continue
    return None


def _parse_bool(val: Any) -> Optional[bool]:
    if isinstance(val, bool):
        return val
    text = _normalize(val).lower()
    if text in _TRUE_TEXT:
        return True
    if text in _FALSE_TEXT:
        return False
    return None


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_values(data_type: str, row_value: Any, rule_value: Any) -> Optional[int]:
    """
    Compare `row_value` to `rule_value` under `data_type` semantics.

    Returns a negative, zero or positive int like a classic comparator, or
    None when the values cannot be compared (missing row value, unparseable
    number or date). None never counts as a match.
    """
    if _is_missing(row_value):
        return None

    if data_type in ('integer', 'number'):
        num_row = _parse_number(row_value)
        num_rule = _parse_number(rule_value)
        if num_row is None or num_rule is None:
            logger.debug(f"Non-numeric comparison skipped: {row_value!r} vs {rule_value!r}")
            return None
        return _cmp(num_row, num_rule)

    if data_type == 'date':
        dt_row = _parse_date(row_value)
        dt_rule = _parse_date(rule_value)
        if dt_row is None or dt_rule is None:
            logger.debug(f"Unparseable date comparison skipped: {row_value!r} vs {rule_value!r}")
            return None
        return _cmp(dt_row, dt_rule)

    if data_type == 'boolean':
        b_row = _parse_bool(row_value)
        b_rule = _parse_bool(rule_value)
        if b_row is None or b_rule is None:
            return None
        return _cmp(b_row, b_rule)

    return _cmp(_normalize(row_value), str(rule_value))
