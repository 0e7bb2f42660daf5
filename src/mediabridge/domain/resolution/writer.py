"""Background persistence of auto-detected mappings."""

from __future__ import annotations

import queue
import threading
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .errors import PersistenceWriteFailed

if TYPE_CHECKING:
    from types import TracebackType

    from mediabridge.domain.model import ProviderMapping
    from mediabridge.domain.ports import MappingStore

log = getLogger(__name__)

_STOP: Final = object()


def save_auto_mapping(store: MappingStore, mapping: ProviderMapping) -> ProviderMapping | None:
    """Create or update ``mapping`` unless a verified mapping already holds the key.

    The verified check and the write happen in one store call, so a user
    confirmation landing concurrently is never overwritten. Returns the stored
    mapping, or ``None`` when the verified mapping was kept.
    """

    stored = store.put_auto(mapping)
    if stored is None:
        log.debug(f"Keeping verified mapping for {mapping.reference} on {mapping.provider}")
    return stored


class MappingWriter:
    """Queue auto mappings and persist them on a worker thread.

    ``submit`` never blocks on storage. Failures are logged as
    ``PersistenceWriteFailed`` and otherwise dropped.
    """

    def __init__(self, store: MappingStore, *, name: str = "mapping-writer") -> None:
        self._store = store
        self._queue: queue.Queue[object] = queue.Queue()
        self._closed = False
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def submit(self, mapping: ProviderMapping) -> None:
        with self._lock:
            if not self._closed:
                self._queue.put(mapping)
                return
        log.warning(f"Mapping writer closed; dropping {mapping.reference} on {mapping.provider}")

    def flush(self) -> None:
        """Block until every submitted mapping has been handled."""

        self._queue.join()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        self._thread.join()

    def __enter__(self) -> MappingWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._write(item)  # type: ignore[arg-type]
            finally:
                self._queue.task_done()

    def _write(self, mapping: ProviderMapping) -> None:
        try:
            save_auto_mapping(self._store, mapping)
        except Exception as exc:
            error = PersistenceWriteFailed(mapping.reference, mapping.provider)
            log.warning(f"{error}: {exc}")
