"""Binds the session lifecycle to the login form's reactive state."""

from __future__ import annotations

import dataclasses
from typing import Callable, Optional

import solara

from donations_app.models import app as app_models
from donations_app.models.auth import Field, LoginResult, ValidationOutcome
from donations_app.models.events import EventState, LifecycleEvent
from donations_app.services.logging import StructuredLogger
from donations_app.services.strings import Strings

from .session import SessionController


class LoginScreenController:
    """Presentation binding for the login screen.

    Field errors come from the synchronous answer of ``submit``. Loading,
    error copy and navigation come only from lifecycle events. Navigation
    happens once per successful attempt, and never for a ``done`` event that
    was already current when the screen subscribed.
    """

    def __init__(
        self,
        session: SessionController,
        *,
        strings: Strings,
        logger: StructuredLogger,
        on_navigate: Callable[[LoginResult], None],
    ) -> None:
        self.session = session
        self.strings = strings
        self._logger = logger
        self._on_navigate = on_navigate
        self.state: solara.Reactive[app_models.LoginFormState] = solara.reactive(app_models.LoginFormState())
        self._handled_attempt = session.stream.current.attempt
        self._unsubscribe: Optional[Callable[[], None]] = session.stream.listen(self._on_event)

    def _update(self, **changes) -> None:
        self.state.set(dataclasses.replace(self.state.value, **changes))

    # ------------------------------------------------------------------ form input
    def set_email(self, email: str) -> None:
        self._update(email=email, field_errors=self._without(Field.EMAIL))

    def set_password(self, password: str) -> None:
        self._update(password=password, field_errors=self._without(Field.PASSWORD))

    def _without(self, field_name: Field):
        errors = dict(self.state.value.field_errors)
        errors.pop(field_name, None)
        return errors

    def submit(self) -> ValidationOutcome:
        form = self.state.value
        outcome = self.session.submit(form.email, form.password)
        self._update(field_errors=dict(outcome.errors))
        return outcome

    def message_for(self, field_name: Field) -> Optional[str]:
        error = self.state.value.field_errors.get(field_name)
        if error is None:
            return None
        return self.strings.validation_message(error)

    # ------------------------------------------------------------------ lifecycle events
    def _on_event(self, event: LifecycleEvent[LoginResult]) -> None:
        if event.state is EventState.LOADING:
            self._update(loading=True, error_message=None)
        elif event.state is EventState.DONE:
            self._update(loading=False, error_message=None)
            self._navigate_once(event)
        elif event.state is EventState.ERROR:
            self._update(loading=False, error_message=self.strings.error_message(event.cause))
        else:
            self._update(loading=False)

    def _navigate_once(self, event: LifecycleEvent[LoginResult]) -> None:
        if event.attempt <= self._handled_attempt or event.data is None:
            return
        self._handled_attempt = event.attempt
        self._logger.info("login.navigate", attempt=event.attempt, user_id=event.data.user.id)
        self._on_navigate(event.data)

    def reset(self) -> None:
        """Clear the form after logout, keeping the last email typed."""

        self.state.set(app_models.LoginFormState(email=self.state.value.email))

    def dispose(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.session.dispose()
