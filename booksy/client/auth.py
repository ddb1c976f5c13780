"""
Client-local authentication state and route guarding.

The bearer token is persisted under ``booksy_token``. The store restores it
once when constructed and treats any non-empty token as signed in; whether
the token is still valid is only discovered when a protected request fails.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .broadcaster import ChangeBroadcaster
from .storage import StorageEvent, STORAGE_EVENT, Tab

TOKEN_KEY = "booksy_token"
AUTH_EVENT = "booksy:auth"

SIGN_IN_PATH = "/signin"


@dataclass
class AuthUser:
    id: str
    email: str
    username: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthUser":
        return cls(
            id=data["id"],
            email=data["email"],
            username=data.get("username") or data.get("name"),
            role=data.get("role"),
        )


class AuthStore:
    """
    Token and signed-in user for one tab.

    The user summary is kept in memory only; after a restart it is unknown
    until the next sign-in even though the token is restored.
    """

    def __init__(self, tab: Tab):
        self.tab = tab
        self.changes = ChangeBroadcaster(tab, AUTH_EVENT, TOKEN_KEY)
        self._token: Optional[str] = tab.get_item(TOKEN_KEY) or None
        self._user: Optional[AuthUser] = None

        # Follow sign-in/sign-out performed in other tabs
        tab.events.add_listener(STORAGE_EVENT, self._on_storage)

    def _on_storage(self, event: StorageEvent) -> None:
        if event.key not in (None, TOKEN_KEY):
            return
        self._token = event.new_value or None
        if self._token is None:
            self._user = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[AuthUser]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def sign_in(self, token: str, user: Optional[AuthUser] = None) -> None:
        self.tab.set_item(TOKEN_KEY, token)
        self._token = token
        if user is not None:
            self._user = user
        self.changes.emit()

    def sign_out(self) -> None:
        self.tab.remove_item(TOKEN_KEY)
        self._token = None
        self._user = None
        self.changes.emit()

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        return self.changes.subscribe(listener)


@dataclass(frozen=True)
class Redirect:
    """Navigation the UI should perform instead of rendering a view."""

    to: str
    state: dict[str, Any] = field(default_factory=dict)
    replace: bool = True


def require_auth(store: AuthStore, location: str) -> Optional[Redirect]:
    """
    Guard a view that needs a signed-in user.

    Returns None when the user may proceed, otherwise a redirect to the
    sign-in view that remembers ``location``.
    """
    if store.is_authenticated:
        return None
    return Redirect(to=SIGN_IN_PATH, state={"from": location})


def return_location(state: Optional[dict[str, Any]], default: str = "/") -> str:
    """Where to go after a successful sign-in."""
    if not state:
        return default
    location = state.get("from")
    if isinstance(location, str) and location.startswith("/") and location != SIGN_IN_PATH:
        return location
    return default
