"""Login screen: email and password form bound to the session controller."""

from __future__ import annotations

import solara

from donations_app.models.auth import Field
from donations_app.state import LoginScreenController
from donations_app.ui.components.app_bar import AppBar


@solara.component
def FieldError(controller: LoginScreenController, field_name: Field) -> None:
    message = controller.message_for(field_name)
    if message:
        solara.Text(message, classes=["da-field-error"])


@solara.component
def View(controller: LoginScreenController) -> None:
    form = controller.state.value
    strings = controller.strings

    AppBar(strings.get("login_title"))
    with solara.Column(classes=["da-screen"]):
        with solara.Column(style={"gap": "0.25rem"}):
            solara.InputText(
                strings.get("login_email"),
                value=form.email,
                on_value=controller.set_email,
                continuous_update=True,
            )
            FieldError(controller, Field.EMAIL)
        with solara.Column(style={"gap": "0.25rem"}):
            solara.InputText(
                strings.get("login_password"),
                value=form.password,
                on_value=controller.set_password,
                password=True,
                continuous_update=True,
            )
            FieldError(controller, Field.PASSWORD)
        if form.loading:
            solara.ProgressLinear(True)
        if form.error_message:
            solara.Error(form.error_message)
        solara.Button(
            strings.get("login_title"),
            color="primary",
            on_click=controller.submit,
            disabled=form.loading,
            classes=["da-submit"],
        )
