"""
Column definitions for a table: the schema lookup used to resolve rule columns.
"""
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence

import pandas as pd
from pandas.api import types as ptypes

from ..rule_engine.rule_schema import (
    VALID_DATA_TYPES, DEFAULT_ADMIN_COLUMNS,
    DATA_TYPE_BOOLEAN, DATA_TYPE_DATE, DATA_TYPE_INTEGER, DATA_TYPE_NUMBER, DATA_TYPE_STRING,
)
from .column_classifier import classify_column


@dataclass(frozen=True)
class ColumnDefinition:
    element_key: str
    element_name: str
    data_type: str = DATA_TYPE_STRING

    def __post_init__(self):
        if self.data_type not in VALID_DATA_TYPES:
            raise ValueError(f"Unknown data type '{self.data_type}' for column '{self.element_key}'")

    def to_dict(self) -> Dict:
        return {'element_key': self.element_key, 'element_name': self.element_name,
                'data_type': self.data_type}

    @classmethod
    def from_dict(cls, d: Dict) -> 'ColumnDefinition':
        return cls(
            element_key=d['element_key'],
            element_name=d.get('element_name', d['element_key']),
            data_type=d.get('data_type', DATA_TYPE_STRING),
        )


class OrderedColumns:
    """The ordered column definitions of one table."""

    def __init__(self, table_id: str, columns: Sequence[ColumnDefinition]):
        self.table_id = table_id
        self._columns: List[ColumnDefinition] = list(columns)
        self._by_key: Dict[str, ColumnDefinition] = {}
        for col in self._columns:
            if col.element_key in self._by_key:
                raise ValueError(f"Duplicate column '{col.element_key}' in table '{table_id}'")
            self._by_key[col.element_key] = col

    def __iter__(self) -> Iterator[ColumnDefinition]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, element_key: str) -> bool:
        return element_key in self._by_key

    @property
    def element_keys(self) -> List[str]:
        return [c.element_key for c in self._columns]

    def find(self, element_key: str) -> ColumnDefinition:
        """Return the definition for `element_key`; raises KeyError if absent."""
        try:
            return self._by_key[element_key]
        except KeyError:
            raise KeyError(f"Column '{element_key}' not found in table '{self.table_id}'") from None

    def get(self, element_key: str) -> Optional[ColumnDefinition]:
        return self._by_key.get(element_key)

    def to_list(self) -> List[Dict]:
        return [c.to_dict() for c in self._columns]

    @classmethod
    def from_list(cls, table_id: str, items: List[Dict]) -> 'OrderedColumns':
        return cls(table_id, [ColumnDefinition.from_dict(d) for d in items])

    @classmethod
    def from_dataframe(cls, table_id: str, df: pd.DataFrame,
                       admin_columns: Sequence[str] = DEFAULT_ADMIN_COLUMNS) -> 'OrderedColumns':
        """
        Infer column definitions from a DataFrame's dtypes.

        Admin columns present in the frame are skipped; object columns are
        classified from their values.
        """
        definitions = []
        for name in df.columns:
            key = str(name)
            if key in admin_columns:
                continue
            definitions.append(ColumnDefinition(key, key, _dtype_to_data_type(df[name])))
        return cls(table_id, definitions)


def _dtype_to_data_type(series: pd.Series) -> str:
    if ptypes.is_bool_dtype(series):
        return DATA_TYPE_BOOLEAN
    if ptypes.is_integer_dtype(series):
        return DATA_TYPE_INTEGER
    if ptypes.is_float_dtype(series):
        non_null = series.dropna()
        if len(non_null) and (non_null == non_null.round()).all():
            return DATA_TYPE_INTEGER
        return DATA_TYPE_NUMBER
    if ptypes.is_datetime64_any_dtype(series):
        return DATA_TYPE_DATE
    return classify_column(series.where(pd.notnull(series), None).tolist())
