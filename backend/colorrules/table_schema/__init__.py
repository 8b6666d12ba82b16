from .column_definitions import ColumnDefinition, OrderedColumns, DEFAULT_ADMIN_COLUMNS
from .column_classifier import classify_column

__all__ = [
    'ColumnDefinition', 'OrderedColumns', 'DEFAULT_ADMIN_COLUMNS',
    'classify_column',
]
