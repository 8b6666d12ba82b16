from .store import KeyValueStore, InMemoryKeyValueStore
from .sqlite_store import SqliteKeyValueStore
from .store_factory import KeyValueStoreFactory
from .rule_storage import RuleStorage, StorageLocation, storage_location

__all__ = [
    'KeyValueStore', 'InMemoryKeyValueStore', 'SqliteKeyValueStore',
    'KeyValueStoreFactory',
    'RuleStorage', 'StorageLocation', 'storage_location',
]
