# erp_client/modules/forms.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from PySide6.QtCore import QObject, Signal

from ..errors import ApiError, DomainError

_log = logging.getLogger(__name__)

IDLE = "idle"
SUBMITTING = "submitting"


@dataclass(frozen=True)
class SubmitResult:
    accepted: bool
    ok: bool = False
    value: Any = None
    error: Optional[Exception] = None

    @property
    def keep_open(self) -> bool:
        """A form closes only after a successful submit."""
        return not self.ok


class FormSubmission(QObject):
    """
    Submit-lock for one logical form: idle -> submitting -> idle.

    A second submit while one is running is ignored (accepted=False).
    Controller failures come back as a result with keep_open=True; the
    controller has already restored the store and notified the user.
    """

    stateChanged = Signal(str)

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self._state = IDLE

    @property
    def state(self) -> str:
        return self._state

    @property
    def submitting(self) -> bool:
        return self._state == SUBMITTING

    def _set_state(self, state: str) -> None:
        self._state = state
        self.stateChanged.emit(state)

    async def submit(self, action: Callable[..., Awaitable[Any]], *args, **kwargs) -> SubmitResult:
        if self.submitting:
            _log.debug("form: submit ignored, already submitting")
            return SubmitResult(accepted=False)
        self._set_state(SUBMITTING)
        try:
            value = await action(*args, **kwargs)
        except (ApiError, DomainError) as e:
            return SubmitResult(accepted=True, ok=False, error=e)
        finally:
            self._set_state(IDLE)
        return SubmitResult(accepted=True, ok=True, value=value)
