"""Account forms driven from Python.

A form binds a pydantic request model to local state, submits through an
:class:`~socialfeed.client.api.ApiClient` and keeps the server's message around
as an alert until the dismiss timer fires::

    idle -> submitting -> success | error -> idle
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel, ValidationError

from socialfeed.client.api import UNEXPECTED_ERROR_MESSAGE, ApiClient, ApiRequestError
from socialfeed.core.normalize import error_message
from socialfeed.models import UpdateNameReq, UpdateUsernameReq

logger = logging.getLogger(__name__)

ALERT_DISMISS_SECONDS = 5.0


class FormState(str, enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


def field_errors_from(exc: ValidationError) -> Dict[str, str]:
    """First message per field, as the form shows them inline."""
    out: Dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("__root__",)
        field = str(loc[0])
        if field in out:
            continue
        out[field] = error_message(err) or "Invalid value"
    return out


class FormController:
    schema: Type[BaseModel]
    method = "PATCH"
    path = ""

    def __init__(
        self,
        client: ApiClient,
        *,
        on_logout: Callable[[], None],
        dismiss_after: float = ALERT_DISMISS_SECONDS,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        self.client = client
        self.on_logout = on_logout
        self.dismiss_after = dismiss_after
        self.timer_factory = timer_factory

        self.state = FormState.IDLE
        self.field_errors: Dict[str, str] = {}
        self.message = ""
        self.code = 0
        self.show_alert = False
        self._timer = None
        self._lock = threading.Lock()
        self._closed = False

    # -- view helpers --------------------------------------------------
    @property
    def is_loading(self) -> bool:
        return self.state is FormState.SUBMITTING

    @property
    def can_submit(self) -> bool:
        return not self.is_loading and not self.field_errors

    @property
    def alert_severity(self) -> Optional[str]:
        if not self.show_alert:
            return None
        return "success" if self.code == 200 else "error"

    # -- lifecycle ------------------------------------------------------
    def validate(self, values: Dict[str, Any]) -> Optional[BaseModel]:
        try:
            parsed = self.schema.model_validate(values)
        except ValidationError as exc:
            self.field_errors = field_errors_from(exc)
            return None
        self.field_errors = {}
        return parsed

    def payload(self, parsed: BaseModel) -> Dict[str, Any]:
        return parsed.model_dump(exclude_none=True)

    def submit(self, values: Dict[str, Any]) -> FormState:
        if self._closed or self.is_loading:
            return self.state
        parsed = self.validate(values)
        if parsed is None:
            return self.state
        if not self.client.token():
            # Signed out; nothing is sent.
            self.on_logout()
            return self.state

        self._cancel_timer()
        self.state = FormState.SUBMITTING
        self.show_alert = False
        try:
            body = self.client.request(self.method, self.path, json=self.payload(parsed))
        except ApiRequestError as exc:
            if exc.is_auth_error:
                self.on_logout()
            self._finish(FormState.ERROR, exc.message, exc.code)
        except Exception:
            logger.exception("form submit failed", extra={"path": self.path})
            self._finish(FormState.ERROR, UNEXPECTED_ERROR_MESSAGE, 500)
        else:
            self._finish(FormState.SUCCESS, body.get("message", ""), body.get("code", 200))
        return self.state

    def dismiss(self) -> None:
        with self._lock:
            self._timer = None
            self.show_alert = False
            if self.state in (FormState.SUCCESS, FormState.ERROR):
                self.state = FormState.IDLE

    def close(self) -> None:
        self._closed = True
        self._cancel_timer()

    # -- internals ------------------------------------------------------
    def _finish(self, state: FormState, message: str, code: int) -> None:
        self.state = state
        self.message = message
        self.code = code
        self.show_alert = True
        if self._closed:
            return
        timer = self.timer_factory(self.dismiss_after, self.dismiss)
        if hasattr(timer, "daemon"):
            timer.daemon = True
        with self._lock:
            self._timer = timer
        timer.start()

    def _cancel_timer(self) -> None:
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()


class UpdateUsernameForm(FormController):
    schema = UpdateUsernameReq
    path = "/api/user/update-username"


class UpdateNameForm(FormController):
    schema = UpdateNameReq
    path = "/api/user/update-name"
