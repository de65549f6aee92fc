"""
PersistedStore - observable state with a persisted subset.

Subclasses declare:
- persist_name:      storage key
- persisted_fields:  attribute name -> key inside the persisted "state" object
- persist_version:   stored next to the state

Every set_state() call updates attributes, writes the persisted subset
(best effort: a failed write is logged, never raised) and then notifies
subscribers. Construction rehydrates persisted fields from storage.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from jobportal.stores.storage import MemoryStorage

logger = logging.getLogger(__name__)

Listener = Callable[["PersistedStore"], None]


class PersistedStore:
    persist_name: str = ""
    persisted_fields: Dict[str, str] = {}
    persist_version: int = 0

    def __init__(self, storage=None):
        self.storage = storage if storage is not None else MemoryStorage()
        self._listeners: List[Listener] = []
        self.rehydrate()

    # ----- state -------------------------------------------------------

    def set_state(self, **changes: Any):
        for field, value in changes.items():
            if not hasattr(self, field):
                raise AttributeError(f"{type(self).__name__} has no field '{field}'")
            setattr(self, field, value)
        self.persist()
        for listener in list(self._listeners):
            listener(self)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener(store) after every state change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ----- persistence -------------------------------------------------

    def persisted_state(self) -> Dict[str, Any]:
        return {key: getattr(self, field) for field, key in self.persisted_fields.items()}

    def persist(self):
        payload = {"state": self.persisted_state(), "version": self.persist_version}
        try:
            self.storage.set_item(self.persist_name, payload)
        except Exception as e:
            logger.warning("Could not persist %s: %s", self.persist_name, e)

    def rehydrate(self) -> bool:
        """Load persisted fields; returns False when nothing usable was stored."""
        stored: Optional[dict] = self.storage.get_item(self.persist_name)
        if not stored or stored.get("version") != self.persist_version:
            return False

        state = stored.get("state") or {}
        for field, key in self.persisted_fields.items():
            if key in state:
                setattr(self, field, state[key])
        return True

    def clear_persisted(self):
        self.storage.remove_item(self.persist_name)
