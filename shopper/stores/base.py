"""Common store behaviour: persistence, change listeners, error state"""

import logging
from typing import Awaitable, Callable, ClassVar, Generic, Optional, TypeVar

from pydantic import BaseModel

from grama_common.errors import GramaError, InternalError

from ..persistence import KeyValueStorage, restore_snapshot

logger = logging.getLogger(__name__)

SnapshotT = TypeVar("SnapshotT", bound=BaseModel)
ResultT = TypeVar("ResultT")

Listener = Callable[["PersistentStore"], None]


class PersistentStore(Generic[SnapshotT]):
    """
    Base for the shopper's state containers.

    Subclasses name their storage key and snapshot model and implement
    ``snapshot()`` / ``_apply_snapshot()``. Every mutation ends in
    ``_changed()``, which saves the snapshot and notifies listeners.
    """

    storage_key: ClassVar[str]
    snapshot_model: ClassVar[type[BaseModel]]

    def __init__(self, storage: KeyValueStorage):
        self._storage = storage
        self._listeners: list[Listener] = []
        self.is_loading: bool = False
        self.error: Optional[str] = None
        self.last_error: Optional[GramaError] = None

    # ==================== Persistence ====================

    def snapshot(self) -> SnapshotT:
        raise NotImplementedError

    def _apply_snapshot(self, snapshot: SnapshotT) -> None:
        raise NotImplementedError

    def restore(self, initial: Optional[SnapshotT] = None) -> None:
        """Load the saved snapshot, or use ``initial`` when one is given"""
        if initial is None:
            initial = restore_snapshot(self.snapshot_model, self._storage.load(self.storage_key))
        self._apply_snapshot(initial)

    def persist(self) -> None:
        self._storage.save(self.storage_key, self.snapshot().model_dump(mode="json"))

    # ==================== Listeners ====================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener after every state change, returns an unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self, persist: bool = True) -> None:
        if persist:
            self.persist()
        for listener in list(self._listeners):
            listener(self)

    # ==================== Status ====================

    def clear_error(self) -> None:
        self.error = None
        self.last_error = None
        self._changed(persist=False)

    def set_loading(self, loading: bool) -> None:
        self.is_loading = loading
        self._changed(persist=False)

    def _start_request(self) -> None:
        self.is_loading = True
        self.error = None
        self.last_error = None
        self._changed(persist=False)

    def _fail(self, error: GramaError) -> None:
        """Record a failed action on the store instead of raising it"""
        logger.info(f"{type(self).__name__}: {error.code} - {error.message}")
        self.error = error.message
        self.last_error = error
        self.is_loading = False
        self._changed(persist=False)

    async def _run(self, call: Awaitable[ResultT], failure_message: str) -> Optional[ResultT]:
        """
        Await a network call on behalf of an action.

        Returns the result, or None after recording the failure on the store.
        """
        try:
            return await call
        except GramaError as e:
            self._fail(e)
        except Exception:
            logger.exception(f"{type(self).__name__}: {failure_message}")
            self._fail(InternalError(failure_message))
        return None
