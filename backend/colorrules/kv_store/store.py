"""
Transactional key-value store abstraction.

Values are text addressed by (table_id, partition, aspect, key) inside an
application scope. Callers should use `transaction()` or `with_transaction()`
rather than driving open/begin/end by hand.
"""
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, TypeVar

from ..errors import StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar('T')

StoreKey = Tuple[str, str, str, str]  # (table_id, partition, aspect, key)


class KeyValueStore(ABC):
    @abstractmethod
    def open(self, scope_id: str) -> Any:
        """Open a handle on the store for an application scope."""
        ...

    @abstractmethod
    def begin(self, handle: Any) -> None:
        ...

    @abstractmethod
    def get_text(self, handle: Any, table_id: str, partition: str, aspect: str, key: str) -> Optional[str]:
        """Return the stored text, or None if the key is absent."""
        ...

    @abstractmethod
    def set_text(self, handle: Any, table_id: str, partition: str, aspect: str, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_key(self, handle: Any, table_id: str, partition: str, aspect: str, key: str) -> None:
        ...

    @abstractmethod
    def end(self, handle: Any, success: bool) -> None:
        """Commit if `success`, otherwise roll back; always releases the handle."""
        ...

    @contextmanager
    def transaction(self, scope_id: str) -> Iterator[Any]:
        """
        Open a handle, begin a transaction and yield the handle.

        The transaction commits only if the body exits normally; any exception
        rolls it back and propagates.
        """
        handle = self.open(scope_id)
        successful = False
        try:
            self.begin(handle)
            yield handle
            successful = True
        finally:
            self.end(handle, successful)

    def with_transaction(self, scope_id: str, fn: Callable[[Any], T]) -> T:
        with self.transaction(scope_id) as handle:
            return fn(handle)


class _MemoryHandle:
    def __init__(self, scope_id: str):
        self.scope_id = scope_id
        self.staged: Dict[StoreKey, Optional[str]] = {}
        self.active = False
        self.closed = False


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store. Writes are staged per handle and applied on commit."""

    def __init__(self):
        self._data: Dict[str, Dict[StoreKey, str]] = {}
        self._lock = threading.Lock()

    def open(self, scope_id: str) -> _MemoryHandle:
        if not scope_id:
            raise StoreUnavailableError("A scope id is required to open the store")
        return _MemoryHandle(scope_id)

    def begin(self, handle: _MemoryHandle) -> None:
        if handle.closed:
            raise StoreUnavailableError("Handle is closed")
        if handle.active:
            raise StoreUnavailableError("Transaction already in progress on this handle")
        handle.active = True
        handle.staged = {}

    def _check_active(self, handle: _MemoryHandle):
        if not handle.active:
            raise StoreUnavailableError("No transaction in progress")

    def get_text(self, handle, table_id, partition, aspect, key):
        self._check_active(handle)
        store_key = (table_id, partition, aspect, key)
        if store_key in handle.staged:
            return handle.staged[store_key]
        with self._lock:
            return self._data.get(handle.scope_id, {}).get(store_key)

    def set_text(self, handle, table_id, partition, aspect, key, value):
        self._check_active(handle)
        handle.staged[(table_id, partition, aspect, key)] = value

    def remove_key(self, handle, table_id, partition, aspect, key):
        self._check_active(handle)
        handle.staged[(table_id, partition, aspect, key)] = None

    def end(self, handle: _MemoryHandle, success: bool) -> None:
        if handle.active and success:
            with self._lock:
                scope = self._data.setdefault(handle.scope_id, {})
                for store_key, value in handle.staged.items():
                    if value is None:
                        scope.pop(store_key, None)
                    else:
                        scope[store_key] = value
        elif handle.active and handle.staged:
            logger.info(f"Rolled back {len(handle.staged)} staged change(s) in scope '{handle.scope_id}'")
        handle.staged = {}
        handle.active = False
        handle.closed = True

    def keys(self, scope_id: str):
        """Committed keys for a scope, in insertion order."""
        with self._lock:
            return list(self._data.get(scope_id, {}))
