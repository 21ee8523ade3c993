"""Application entry point: one controller per browser session, routed by state."""

from __future__ import annotations

import os
from pathlib import Path

import solara

from donations_app.core.styles import GlobalStyles
from donations_app.models import app as app_models
from donations_app.services.config import bootstrap_settings
from donations_app.state import AppController, create_controller
from donations_app.ui.pages import home, login

PROJECT_ROOT = Path(os.getenv("DONATIONS_EXECUTION_ROOT", Path(__file__).resolve().parents[2]))


def build_app_controller() -> AppController:
    return create_controller(bootstrap_settings(execution_root=PROJECT_ROOT))


@solara.component
def Page() -> None:
    controller = solara.use_memo(build_app_controller, [])

    def dispose_on_unmount():
        return controller.dispose

    solara.use_effect(dispose_on_unmount, [controller])

    app_state = controller.state.value
    GlobalStyles()
    if app_state.route == app_models.HOME_PATH and app_state.is_authenticated:
        home.View(controller)
    else:
        login.View(controller.login)
