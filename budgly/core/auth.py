# budgly/core/auth.py
import logging
from typing import Any, Callable, List, Optional

from supabase import Client

from budgly.core.exceptions import NotAuthenticatedError
from budgly.core.models import User

logger = logging.getLogger(__name__)

SessionListener = Callable[[Optional[User]], None]


def user_from_auth(auth_user: Any) -> Optional[User]:
    """Maps a gotrue user object to our ``User``."""
    if auth_user is None:
        return None
    metadata = getattr(auth_user, "user_metadata", None) or {}
    return User(
        uid=str(auth_user.id),
        email=getattr(auth_user, "email", None),
        display_name=metadata.get("display_name") or metadata.get("full_name"),
    )


def user_from_session(session: Any) -> Optional[User]:
    if session is None:
        return None
    return user_from_auth(getattr(session, "user", None))


class AuthGateway:
    """Sign-in state of one Supabase client.

    The gateway follows the SDK's auth events and forwards identity changes
    to subscribers. Since the session lives inside the client, every
    signed-in user needs a gateway (and a client) of their own.
    """

    def __init__(self, supabase_client: Client):
        self.client = supabase_client
        self._listeners: List[SessionListener] = []
        self._current_user = user_from_session(self.client.auth.get_session())
        self._subscription = self.client.auth.on_auth_state_change(self._on_auth_state_change)

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    def require_user(self) -> User:
        if self._current_user is None:
            raise NotAuthenticatedError("Sign in first")
        return self._current_user

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Calls ``listener`` now with the current user, then on every change.

        Returns a function that removes the listener again.
        """
        self._listeners.append(listener)
        listener(self._current_user)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, email: str, password: str) -> User:
        response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        user = user_from_auth(response.user)
        self._set_user(user)
        return user

    def sign_up(self, email: str, password: str) -> User:
        """Creates the account; signs in too unless the project wants email confirmation."""
        response = self.client.auth.sign_up({"email": email, "password": password})
        user = user_from_auth(response.user)
        if response.session is not None:
            self._set_user(user)
        return user

    def sign_out(self) -> None:
        self.client.auth.sign_out()
        self._set_user(None)

    def close(self) -> None:
        self._listeners.clear()
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_auth_state_change(self, event: Any, session: Any) -> None:
        logger.debug("Auth event %s", event)
        self._set_user(user_from_session(session))

    def _set_user(self, user: Optional[User]) -> None:
        if user == self._current_user:
            return
        self._current_user = user
        if user is None:
            logger.info("Session ended")
        else:
            logger.info("Session started for %s", user.email or user.uid)
        for listener in list(self._listeners):
            listener(user)
