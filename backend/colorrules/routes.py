"""
Flask Blueprint for color rule groups.
Registers all /api/color-rules/* endpoints.

Every rule group is addressed by one of three binding prefixes:
    /tables/<table_id>/columns/<element_key>   rules for a single column
    /tables/<table_id>/table                   rules for whole rows
    /tables/<table_id>/status                  rules for the status column
"""
import io
import logging
import uuid
from typing import Dict, List, Optional

import pandas as pd
from flask import Blueprint, current_app, jsonify, request
from extensions import limiter

from .errors import RuleSaveError, StoreUnavailableError, UnresolvableColumnError
from .kv_store import KeyValueStoreFactory, RuleStorage
from .rule_engine import (
    Rule, RuleGroup, RuleGroupBinding,
    BINDING_COLUMN, BINDING_TABLE, BINDING_STATUS_COLUMN, VALID_OPERATORS,
    evaluate_rows, evaluate_table, summarize_guides,
)
from .table_schema import OrderedColumns

logger = logging.getLogger(__name__)

color_rules_bp = Blueprint('color_rules', __name__, url_prefix='/api/color-rules')

STORAGE_EXTENSION_KEY = 'color_rules_storage'

_BINDING_PREFIXES = [
    ('/tables/<table_id>/columns/<element_key>', {'kind': BINDING_COLUMN}),
    ('/tables/<table_id>/table', {'kind': BINDING_TABLE, 'element_key': None}),
    ('/tables/<table_id>/status', {'kind': BINDING_STATUS_COLUMN, 'element_key': None}),
]


def binding_route(suffix: str, methods: List[str]):
    """Register a view under all three binding prefixes."""
    def decorator(view):
        for prefix, defaults in _BINDING_PREFIXES:
            color_rules_bp.add_url_rule(
                prefix + suffix,
                endpoint=f"{view.__name__}_{defaults['kind'].lower()}",
                view_func=view,
                methods=methods,
                defaults=defaults,
            )
        return view
    return decorator


# ── Helpers ───────────────────────────────────────────────────────────────────
def _get_storage() -> RuleStorage:
    return current_app.extensions[STORAGE_EXTENSION_KEY]


def _load_group(kind: str, table_id: str, element_key: Optional[str]) -> RuleGroup:
    binding = RuleGroupBinding(kind=kind, table_id=table_id, element_key=element_key)
    return RuleGroup.load(_get_storage(), binding)


def _rule_from_body(body: Dict, rule_id: Optional[str] = None) -> Rule:
    """Build a Rule from a request dict; a missing ruleId gets a generated one."""
    if not isinstance(body, dict):
        raise ValueError("Each rule must be a JSON object")
    for k in ('elementKey', 'operator'):
        if k not in body:
            raise ValueError(f"Rule missing '{k}'")
    rule_id = rule_id or body.get('ruleId') or str(uuid.uuid4())
    return Rule.from_dict({**body, 'ruleId': rule_id})


def _columns_for_rows(table_id: str, body: Dict, rows: List[Dict], admin_columns) -> OrderedColumns:
    """Use explicit column definitions when given, otherwise infer them from the rows."""
    if body.get('columns'):
        return OrderedColumns.from_list(table_id, body['columns'])
    return OrderedColumns.from_dataframe(table_id, pd.DataFrame(rows), admin_columns)


def _guides_response(guides) -> Dict:
    return {
        'guides': [g.to_dict() if g is not None else None for g in guides],
        'summary': summarize_guides(guides),
    }


# ── Error handlers ────────────────────────────────────────────────────────────
@color_rules_bp.errorhandler(UnresolvableColumnError)
def _handle_unresolvable_column(e):
    logger.error(f"Evaluation failed: {e}")
    return jsonify({'error': str(e), 'element_key': e.element_key}), 422


@color_rules_bp.errorhandler(RuleSaveError)
def _handle_save_error(e):
    return jsonify({'error': f'Saving rules failed: {e}'}), 500


@color_rules_bp.errorhandler(StoreUnavailableError)
def _handle_store_error(e):
    logger.error(f"Key-value store unavailable: {e}")
    return jsonify({'error': f'Rule store unavailable: {e}'}), 500


# ── Rule group endpoints ──────────────────────────────────────────────────────
@binding_route('', methods=['GET'])
def get_rule_group(kind, table_id, element_key):
    """Return the rules of a group in priority order."""
    try:
        group = _load_group(kind, table_id, element_key)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({**group.to_dict(), 'count': group.count()})


@binding_route('', methods=['PUT'])
@limiter.limit("60 per minute")
def replace_rule_group(kind, table_id, element_key):
    """
    Replace every rule in a group and save it.

    Body: { rules: [{ruleId?, elementKey, operator, value, foreground, background}, ...] }
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict) or not isinstance(body.get('rules'), list):
        return jsonify({'error': "Request body must be JSON with a 'rules' list"}), 400

    try:
        group = _load_group(kind, table_id, element_key)
        group.replace_all([_rule_from_body(r) for r in body['rules']])
    except (ValueError, KeyError, TypeError) as e:
        return jsonify({'error': f'Invalid rules: {e}'}), 400

    group.save()
    return jsonify({**group.to_dict(), 'count': group.count()})


@binding_route('', methods=['DELETE'])
@limiter.limit("60 per minute")
def clear_rule_group(kind, table_id, element_key):
    """Drop every rule in a group; the stored key is removed."""
    try:
        group = _load_group(kind, table_id, element_key)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    group.replace_all([])
    group.save()
    return jsonify({**group.to_dict(), 'count': 0})


@binding_route('/rules', methods=['POST'])
@limiter.limit("60 per minute")
def add_rule(kind, table_id, element_key):
    """Append a rule at the lowest priority and save the group."""
    body = request.get_json(silent=True)
    if not body:
        return jsonify({'error': 'Request body required (JSON)'}), 400

    try:
        group = _load_group(kind, table_id, element_key)
        rule = _rule_from_body(body)
        group.add_rule(rule)
    except (ValueError, KeyError, TypeError) as e:
        return jsonify({'error': f'Invalid rule: {e}'}), 400

    group.save()
    return jsonify({'rule': rule.to_dict(), 'count': group.count()}), 201


@binding_route('/rules/<rule_id>', methods=['PUT'])
@limiter.limit("60 per minute")
def update_rule(kind, table_id, element_key, rule_id):
    """Replace a rule in place, keeping its priority."""
    body = request.get_json(silent=True)
    if not body:
        return jsonify({'error': 'Request body required (JSON)'}), 400

    try:
        group = _load_group(kind, table_id, element_key)
        rule = _rule_from_body(body, rule_id=rule_id)
    except (ValueError, KeyError, TypeError) as e:
        return jsonify({'error': f'Invalid rule: {e}'}), 400

    if not group.update_rule(rule):
        return jsonify({'error': f"Rule '{rule_id}' not found"}), 404

    group.save()
    return jsonify({'rule': rule.to_dict(), 'count': group.count()})


@binding_route('/rules/<rule_id>', methods=['DELETE'])
@limiter.limit("60 per minute")
def delete_rule(kind, table_id, element_key, rule_id):
    try:
        group = _load_group(kind, table_id, element_key)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    rule = group.get_rule(rule_id)
    if rule is None or not group.remove_rule(rule):
        return jsonify({'error': f"Rule '{rule_id}' not found"}), 404

    group.save()
    return jsonify({'removed': rule_id, 'count': group.count()})


# ── Evaluation endpoints ──────────────────────────────────────────────────────
@binding_route('/evaluate', methods=['POST'])
def evaluate(kind, table_id, element_key):
    """
    Resolve the color guide of each row against the stored rules.

    Body: { rows: [{column: value, ...}, ...], columns?: [{element_key, element_name, data_type}] }
    Returns: { guides: [{foreground, background} | null, ...], summary: {...} }
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict) or not isinstance(body.get('rows'), list):
        return jsonify({'error': "Request body must be JSON with a 'rows' list"}), 400

    rows = body['rows']
    if not all(isinstance(r, dict) for r in rows):
        return jsonify({'error': 'Each row must be a JSON object'}), 400
    try:
        group = _load_group(kind, table_id, element_key)
        columns = _columns_for_rows(table_id, body, rows, group.admin_columns)
    except (ValueError, KeyError, TypeError) as e:
        return jsonify({'error': f'Invalid request: {e}'}), 400

    guides = evaluate_rows(columns, rows, group.rules, group.admin_columns)
    return jsonify(_guides_response(guides))


@binding_route('/evaluate-file', methods=['POST'])
@limiter.limit("20 per minute;200 per day")
def evaluate_file(kind, table_id, element_key):
    """
    Evaluate the stored rules against every row of an uploaded Excel sheet.

    Form fields: file (.xlsx), sheet_name (optional), header_row (optional, default 0)
    """
    f = request.files.get('file')
    if not f:
        return jsonify({'error': 'No file uploaded'}), 400
    if not f.filename.lower().endswith('.xlsx'):
        return jsonify({'error': 'Only .xlsx files supported'}), 400

    sheet_name = request.form.get('sheet_name') or 0
    try:
        header_row = int(request.form.get('header_row', 0))
    except ValueError:
        return jsonify({'error': 'header_row must be an integer'}), 400

    try:
        group = _load_group(kind, table_id, element_key)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    try:
        df = pd.read_excel(io.BytesIO(f.read()), sheet_name=sheet_name, header=header_row, engine='openpyxl')
    except Exception as e:
        logger.error(f"Reading uploaded sheet failed: {e}")
        return jsonify({'error': f'Failed to read {f.filename}: {str(e)}'}), 400

    columns = OrderedColumns.from_dataframe(table_id, df, group.admin_columns)
    guides = evaluate_table(group, columns, df)
    response = _guides_response(guides)
    response['columns'] = columns.to_list()
    return jsonify(response)


# ── Metadata ──────────────────────────────────────────────────────────────────
@color_rules_bp.route('/operators', methods=['GET'])
def list_operators():
    return jsonify({'operators': [{'name': k, 'symbol': v} for k, v in VALID_OPERATORS.items()]})


@color_rules_bp.route('/store-backends', methods=['GET'])
def list_store_backends():
    return jsonify(KeyValueStoreFactory.list_backends())
