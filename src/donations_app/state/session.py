"""Authentication session controller."""

from __future__ import annotations

from typing import Optional

from donations_app.core import exceptions, validation
from donations_app.core.loop import BackgroundLoop
from donations_app.core.streams import LifecycleStream
from donations_app.models.auth import Credentials, LoginResult, ValidationOutcome
from donations_app.models.events import EventState
from donations_app.services.gateway import LoginGateway
from donations_app.services.logging import StructuredLogger

from .operation import OperationRunner


class SessionController:
    """Validate credentials, call the login gateway and publish its lifecycle.

    Validation errors are answered synchronously from :meth:`submit` and never
    reach the gateway or the stream. Accepted submits move the stream through
    ``loading`` and then ``done`` or ``error``. A valid submit that arrives
    while an attempt is still loading is ignored.
    """

    def __init__(
        self,
        *,
        gateway: LoginGateway,
        logger: StructuredLogger,
        password_min_length: int = validation.PASSWORD_MIN_LENGTH,
        login_timeout: Optional[float] = None,
        loop: Optional[BackgroundLoop] = None,
    ) -> None:
        self._gateway = gateway
        self._logger = logger
        self._password_min_length = password_min_length
        self._runner: OperationRunner[LoginResult] = OperationRunner(
            "login", logger, timeout=login_timeout, loop=loop
        )

    # ------------------------------------------------------------------ accessors
    @property
    def stream(self) -> LifecycleStream[LoginResult]:
        return self._runner.stream

    @property
    def state(self) -> EventState:
        return self._runner.current.state

    @property
    def is_loading(self) -> bool:
        return self._runner.is_loading

    @property
    def disposed(self) -> bool:
        return self._runner.disposed

    @property
    def password_min_length(self) -> int:
        return self._password_min_length

    @property
    def result(self) -> Optional[LoginResult]:
        current = self._runner.current
        return current.data if current.state is EventState.DONE else None

    # ------------------------------------------------------------------ operations
    def submit(self, email: str, password: str) -> ValidationOutcome:
        self._runner.ensure_active()
        errors = validation.validate(email, password, min_password_length=self._password_min_length)
        if errors:
            self._logger.info(
                "login.validation.failed",
                fields=sorted(field.value for field in errors),
                errors=sorted(error.value for error in errors.values()),
            )
            return ValidationOutcome(errors=errors, accepted=False)

        credentials = Credentials(validation.normalise_email(email), password)
        accepted = self._runner.start(lambda: self._login(credentials))
        return ValidationOutcome(errors={}, accepted=accepted)

    async def _login(self, credentials: Credentials) -> LoginResult:
        result = await self._gateway.login(credentials.email, credentials.password)
        if not isinstance(result, LoginResult):
            raise exceptions.GatewayError(
                code=exceptions.MALFORMED_PAYLOAD,
                message=f"Login gateway returned {type(result).__name__}",
            )
        return result

    def dispose(self) -> None:
        self._runner.dispose()
