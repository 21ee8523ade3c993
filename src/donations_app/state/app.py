"""Application controller wiring the login and home screens together."""

from __future__ import annotations

import dataclasses
from typing import Optional

import solara

from donations_app.core.loop import BackgroundLoop
from donations_app.models import app as app_models
from donations_app.models.auth import LoginResult
from donations_app.services import gateway as gateway_service
from donations_app.services.api import ApiClient
from donations_app.services.config import ClientSettings
from donations_app.services.logging import StructuredLogger
from donations_app.services.strings import Strings

from .home import HomeController
from .login import LoginScreenController
from .session import SessionController

CLIENT_CLOSE_TIMEOUT_SECONDS = 5.0


class AppController:
    """High level orchestrator owning one controller per screen.

    Both screens schedule their attempts on a single background loop owned by
    this controller, so a shared ``ApiClient`` keeps one connection pool for
    the whole session. :meth:`dispose` closes the client and stops the loop.
    """

    def __init__(
        self,
        *,
        settings: ClientSettings,
        logger: StructuredLogger,
        login_gateway: gateway_service.LoginGateway,
        donation_gateway: gateway_service.DonationGateway,
        api_client: Optional[ApiClient] = None,
        loop: Optional[BackgroundLoop] = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.api_client = api_client
        self.loop = loop or BackgroundLoop(name=f"{settings.app_name}-loop")
        self._owns_loop = loop is None
        self._disposed = False
        self.strings = Strings(settings.locale, min_password_length=settings.password_min_length)
        self.state: solara.Reactive[app_models.AppState] = solara.reactive(app_models.AppState())
        self.logger.configure_context(app_name=settings.app_name, environment=settings.environment_key)

        session = SessionController(
            gateway=login_gateway,
            logger=logger,
            password_min_length=settings.password_min_length,
            login_timeout=settings.login_timeout_seconds,
            loop=self.loop,
        )
        self.login = LoginScreenController(
            session,
            strings=self.strings,
            logger=logger,
            on_navigate=self._on_login,
        )
        self.home = HomeController(
            gateway=donation_gateway,
            logger=logger,
            strings=self.strings,
            token_provider=self._token,
            timeout=settings.request_timeout_seconds,
            loop=self.loop,
        )

    # ------------------------------------------------------------------ navigation
    def _token(self) -> Optional[str]:
        login = self.state.value.login
        return login.token if login else None

    def _on_login(self, result: LoginResult) -> None:
        self.state.set(
            dataclasses.replace(self.state.value, login=result, route=app_models.HOME_PATH)
        )
        self.logger.set_user_id(result.user.id)
        self.logger.set_screen("home")

    def navigate(self, route: str) -> None:
        if route == app_models.HOME_PATH and not self.state.value.is_authenticated:
            route = app_models.LOGIN_PATH
        self.state.set(dataclasses.replace(self.state.value, route=route))

    def logout(self) -> None:
        self.state.set(app_models.AppState())
        self.login.reset()
        self.home.reset()
        self.logger.set_user_id(None)
        self.logger.set_screen("login")
        self.logger.info("session.logout")

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.login.dispose()
        self.home.dispose()
        if self.api_client is not None and not self.api_client.closed:
            self.loop.run(self.api_client.aclose(), timeout=CLIENT_CLOSE_TIMEOUT_SECONDS)
        if self._owns_loop:
            self.loop.stop()
        self.logger.info("app.disposed")


def create_controller(settings: ClientSettings, *, logger: Optional[StructuredLogger] = None) -> AppController:
    logger = logger or StructuredLogger()
    client: Optional[ApiClient] = None
    if gateway_service.uses_http(settings):
        client = ApiClient(settings.api_base_url, timeout=settings.request_timeout_seconds)
    login_gateway, donation_gateway = gateway_service.build_gateways(settings, client=client)
    logger.info("app.bootstrap", **settings.public_config())
    return AppController(
        settings=settings,
        logger=logger,
        login_gateway=login_gateway,
        donation_gateway=donation_gateway,
        api_client=client,
    )
