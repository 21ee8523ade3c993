"""Donation feed controller for the home screen."""

from __future__ import annotations

import dataclasses
from typing import Callable, List, Optional

import solara

from donations_app.core.loop import BackgroundLoop
from donations_app.core.streams import LifecycleStream
from donations_app.models import app as app_models
from donations_app.models.donation import Donation
from donations_app.models.events import EventState, LifecycleEvent
from donations_app.services.gateway import DonationGateway
from donations_app.services.logging import StructuredLogger
from donations_app.services.strings import Strings

from .operation import OperationRunner


class HomeController:
    """Load the donation list and mirror its lifecycle into reactive state."""

    def __init__(
        self,
        *,
        gateway: DonationGateway,
        logger: StructuredLogger,
        strings: Strings,
        token_provider: Callable[[], Optional[str]] = lambda: None,
        timeout: Optional[float] = None,
        loop: Optional[BackgroundLoop] = None,
    ) -> None:
        self._gateway = gateway
        self._logger = logger
        self._strings = strings
        self._token_provider = token_provider
        self._runner: OperationRunner[List[Donation]] = OperationRunner(
            "donations", logger, timeout=timeout, loop=loop
        )
        self.state: solara.Reactive[app_models.HomeState] = solara.reactive(app_models.HomeState())
        self._runner.stream.listen(self._on_event)

    @property
    def stream(self) -> LifecycleStream[List[Donation]]:
        return self._runner.stream

    @property
    def is_loading(self) -> bool:
        return self._runner.is_loading

    def load(self) -> bool:
        """Fetch the feed unless a fetch is already running."""

        token = self._token_provider()
        return self._runner.start(lambda: self._gateway.fetch_donations(token))

    refresh = load

    def ensure_loaded(self) -> None:
        current = self.state.value
        if current.loaded or current.loading:
            return
        self.load()

    def _on_event(self, event: LifecycleEvent[List[Donation]]) -> None:
        current = self.state.value
        if event.state is EventState.LOADING:
            updated = dataclasses.replace(current, loading=True, error_message=None)
        elif event.state is EventState.DONE:
            donations = tuple(event.data or ())
            updated = dataclasses.replace(
                current, loading=False, donations=donations, error_message=None, loaded=True
            )
        elif event.state is EventState.ERROR:
            updated = dataclasses.replace(
                current, loading=False, error_message=self._strings.error_message(event.cause)
            )
        else:
            updated = current
        self.state.set(updated)

    def reset(self) -> None:
        self.state.set(app_models.HomeState())

    def dispose(self) -> None:
        self._runner.dispose()
