from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..logging import get_logger

LOG = get_logger("inventory-feedback")

Clock = Callable[[], float]


class ConfirmationError(Exception):
    pass


@dataclass(frozen=True)
class Toast:
    message: str
    expires_at: float

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ToastCenter:
    """A single transient notification that dismisses itself."""

    def __init__(self, *, clock: Clock = time.monotonic, default_seconds: float = 3.0) -> None:
        self._clock = clock
        self.default_seconds = default_seconds
        self._toast: Optional[Toast] = None

    def show(self, message: str, seconds: Optional[float] = None) -> Toast:
        lifetime = self.default_seconds if seconds is None else seconds
        self._toast = Toast(message=message, expires_at=self._clock() + lifetime)
        LOG.info("Toast: %s", message)
        return self._toast

    def current(self) -> Optional[Toast]:
        if self._toast is not None and self._clock() >= self._toast.expires_at:
            self._toast = None
        return self._toast

    def dismiss(self) -> None:
        self._toast = None


@dataclass(frozen=True)
class ConfirmationPrompt:
    id: str
    title: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "title": self.title, "message": self.message}


class ConfirmationCenter:
    """Holds at most one open confirmation prompt, like a modal dialog.

    Opening a prompt replaces any prompt still open. The action runs only when
    the open prompt is confirmed by id.
    """

    def __init__(self) -> None:
        self._prompt: Optional[ConfirmationPrompt] = None
        self._action: Optional[Callable[[], None]] = None

    @property
    def current(self) -> Optional[ConfirmationPrompt]:
        return self._prompt

    def request(self, title: str, message: str, on_confirm: Callable[[], None]) -> ConfirmationPrompt:
        if self._prompt is not None:
            LOG.debug("Replacing open prompt %s", self._prompt.id)
        self._prompt = ConfirmationPrompt(id=uuid.uuid4().hex, title=title, message=message)
        self._action = on_confirm
        return self._prompt

    def _take(self, prompt_id: str) -> Callable[[], None]:
        if self._prompt is None or self._prompt.id != prompt_id or self._action is None:
            raise ConfirmationError(f"No open confirmation with id {prompt_id}")
        return self._action

    def confirm(self, prompt_id: str) -> None:
        """Run the prompt's action; the prompt closes only if it succeeds."""
        action = self._take(prompt_id)
        action()
        self._close()

    def cancel(self, prompt_id: str) -> None:
        self._take(prompt_id)
        self._close()

    def _close(self) -> None:
        self._prompt = None
        self._action = None
