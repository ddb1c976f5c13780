"""
Client-local persistent storage.

A ``StorageArea`` is a string key/value store (optionally backed by a JSON
file) shared by any number of ``Tab``s, the way browser local storage is
shared by every window of one origin. Each tab has its own in-process
``EventBus``. When one tab writes, every *other* tab sharing the area
receives a ``storage`` event; the writing tab does not.
"""

import json
import os
import tempfile
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

from loguru import logger

STORAGE_EVENT = "storage"

Listener = Callable[[Any], None]


@dataclass(frozen=True)
class StorageEvent:
    """A change made to the shared area by another tab."""

    key: Optional[str]
    old_value: Optional[str]
    new_value: Optional[str]


class EventBus:
    """Synchronous in-process event dispatch."""

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def add_listener(self, event_type: str, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A callable that removes the listener.
        """
        self._listeners[event_type].append(listener)

        def remove() -> None:
            try:
                self._listeners[event_type].remove(listener)
            except ValueError:
                pass

        return remove

    def dispatch(self, event_type: str, event: Any = None) -> None:
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners.get(event_type, ())):
            listener(event)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, ()))


class StorageArea:
    """
    Key/value strings shared by tabs, last write wins.

    Usage:
        area = StorageArea(Path("~/.booksy/storage.json").expanduser())
        tab = area.open_tab()
        tab.set_item("booksy_token", "...")
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._items: dict[str, str] = self._load()
        self._tabs: list["Tab"] = []

    def _load(self) -> dict[str, str]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed storage file {self.path}")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a crash never leaves a half-written file
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._items, f)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def open_tab(self) -> "Tab":
        tab = Tab(self)
        self._tabs.append(tab)
        return tab

    def _detach(self, tab: "Tab") -> None:
        if tab in self._tabs:
            self._tabs.remove(tab)

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def write(self, writer: Optional["Tab"], key: str, value: Optional[str]) -> None:
        """
        Set (or, with ``value=None``, remove) a key and notify the other tabs.
        """
        old_value = self._items.get(key)
        if value is None:
            self._items.pop(key, None)
        else:
            self._items[key] = value
        self._save()

        if old_value == value:
            return

        event = StorageEvent(key=key, old_value=old_value, new_value=value)
        for tab in list(self._tabs):
            if tab is not writer:
                tab.events.dispatch(STORAGE_EVENT, event)


class Tab:
    """A browsing context attached to a ``StorageArea``."""

    def __init__(self, area: StorageArea):
        self.area = area
        self.events = EventBus()

    def get_item(self, key: str) -> Optional[str]:
        return self.area.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.area.write(self, key, value)

    def remove_item(self, key: str) -> None:
        self.area.write(self, key, None)

    def close(self) -> None:
        """Stop receiving storage events from other tabs."""
        self.area._detach(self)
