"""
Change broadcaster for client-local state.

One logical channel with two transports: the in-process event of the
current tab, and the storage events other tabs receive when the watched
key changes. Subscribers register once and hear about both.
"""

from typing import Callable

from .storage import STORAGE_EVENT, StorageEvent, Tab


class ChangeBroadcaster:
    """
    Usage:
        changes = ChangeBroadcaster(tab, "booksy:cart", "booksy_cart_v1")
        unsubscribe = changes.subscribe(refresh_badge)
        changes.emit()
    """

    def __init__(self, tab: Tab, channel: str, storage_key: str):
        self.tab = tab
        self.channel = channel
        self.storage_key = storage_key

    def emit(self) -> None:
        """Notify subscribers in this tab."""
        self.tab.events.dispatch(self.channel)

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """
        Call ``listener`` on local changes and on changes from other tabs.

        Returns:
            A callable that removes both registrations.
        """
        def on_local(_event) -> None:
            listener()

        def on_storage(event: StorageEvent) -> None:
            if event.key is None or event.key == self.storage_key:
                listener()

        remove_local = self.tab.events.add_listener(self.channel, on_local)
        remove_storage = self.tab.events.add_listener(STORAGE_EVENT, on_storage)

        def unsubscribe() -> None:
            remove_local()
            remove_storage()

        return unsubscribe
