"""
JSON encoding of rule lists for the key-value store.
"""
import json
from typing import List, Optional, Sequence

from ..errors import RuleDecodeError, RuleEncodeError
from .rule_schema import Rule

EMPTY_RULE_LIST = '[]'


def encode_rules(rules: Sequence[Rule]) -> str:
    """Serialize rules in priority order. An empty list encodes to '[]'."""
    try:
        return json.dumps([r.to_dict() for r in rules])
    except (TypeError, ValueError, AttributeError) as e:
        raise RuleEncodeError(f"Could not serialize rule list: {e}") from e


def decode_rules(text: Optional[str]) -> List[Rule]:
    """
    Parse stored rule text back into rules.

    None or blank text means nothing is stored and yields an empty list.
    Anything else that is not a JSON array of rule objects raises RuleDecodeError.
    """
    if text is None or not text.strip():
        return []

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise RuleDecodeError(f"Stored rule list is not valid JSON: {e}") from e

    if not isinstance(payload, list):
        raise RuleDecodeError(f"Stored rule list must be a JSON array, got {type(payload).__name__}")

    rules = []
    seen_ids = set()
    for i, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise RuleDecodeError(f"rules[{i}] must be an object")
        try:
            rules.append(Rule.from_dict(entry))
        except KeyError as e:
            raise RuleDecodeError(f"rules[{i}] missing {e}") from e
        except (ValueError, TypeError) as e:
            raise RuleDecodeError(f"rules[{i}]: {e}") from e
        if rules[-1].rule_id in seen_ids:
            raise RuleDecodeError(f"rules[{i}] repeats rule id '{rules[-1].rule_id}'")
        seen_ids.add(rules[-1].rule_id)
    return rules
