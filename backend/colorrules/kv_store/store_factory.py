"""
Key-value store backend selection. Backends are chosen by name from configuration.
"""
from typing import Any

from .sqlite_store import SqliteKeyValueStore
from .store import InMemoryKeyValueStore, KeyValueStore


class KeyValueStoreFactory:
    SUPPORTED_BACKENDS = {
        'sqlite': {
            'class': SqliteKeyValueStore,
            'options': ['db_path', 'timeout'],
            'description': 'SQLite database file shared by all handles',
        },
        'memory': {
            'class': InMemoryKeyValueStore,
            'options': [],
            'description': 'Process-local store; contents are lost on restart',
        },
    }

    @staticmethod
    def get_store(backend: str, **options: Any) -> KeyValueStore:
        backend = backend.lower()
        if backend not in KeyValueStoreFactory.SUPPORTED_BACKENDS:
            raise ValueError(f"Unsupported store backend '{backend}'. Supported: {list(KeyValueStoreFactory.SUPPORTED_BACKENDS)}")

        cfg = KeyValueStoreFactory.SUPPORTED_BACKENDS[backend]
        accepted = {k: v for k, v in options.items() if k in cfg['options'] and v is not None}
        return cfg['class'](**accepted)

    @staticmethod
    def list_backends() -> dict:
        return {
            name: {'options': cfg['options'], 'description': cfg['description']}
            for name, cfg in KeyValueStoreFactory.SUPPORTED_BACKENDS.items()
        }
