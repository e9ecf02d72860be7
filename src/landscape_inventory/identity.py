from __future__ import annotations

import uuid
from typing import Callable, List, Optional

from .logging import get_logger

LOG = get_logger("inventory-identity")

IdentityCallback = Callable[[Optional[str]], None]


class IdentityProvider:
    """Holds the current opaque user id and tells listeners when it changes.

    Listeners are called immediately with the current value on registration,
    then on every change (None after sign-out).
    """

    def __init__(self) -> None:
        self._user_id: Optional[str] = None
        self._listeners: List[IdentityCallback] = []

    @property
    def current_user_id(self) -> Optional[str]:
        return self._user_id

    def on_change(self, callback: IdentityCallback) -> Callable[[], None]:
        self._listeners.append(callback)
        callback(self._user_id)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def sign_in(self, user_id: str) -> str:
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValueError("user_id must not be empty")
        self._set(user_id)
        return user_id

    def sign_in_anonymously(self) -> str:
        return self.sign_in(uuid.uuid4().hex)

    def sign_out(self) -> None:
        self._set(None)

    def _set(self, user_id: Optional[str]) -> None:
        if user_id == self._user_id:
            return
        LOG.info("Identity changed: %s -> %s", self._user_id or "<none>", user_id or "<none>")
        self._user_id = user_id
        for listener in list(self._listeners):
            listener(user_id)
