"""Home screen listing the available donations."""

from __future__ import annotations

import solara

from donations_app.models.donation import Donation
from donations_app.state import AppController
from donations_app.ui.components.app_bar import AppBar


@solara.component
def DonationTile(donation: Donation) -> None:
    with solara.Row(classes=["da-donation"]):
        if donation.cover_url:
            solara.Image(donation.cover_url, width="75px")
        with solara.Column(style={"gap": "0", "minWidth": "0"}):
            solara.Text(donation.title, classes=["da-donation-title"])
            solara.Text(donation.description, classes=["da-donation-description"])


@solara.component
def View(controller: AppController) -> None:
    home = controller.home
    feed = home.state.value
    strings = controller.strings

    solara.use_effect(home.ensure_loaded, [])

    AppBar(
        strings.get("home_title"),
        actions=lambda: solara.Button(strings.get("home_logout"), text=True, on_click=controller.logout),
    )
    if feed.loading and not feed.donations:
        with solara.Row(justify="center", style={"padding": "2rem"}):
            solara.SpinnerSolara()
    elif feed.error_message:
        with solara.Column(style={"padding": "2rem", "alignItems": "center"}):
            solara.Text(feed.error_message)
            solara.Button(strings.get("home_retry"), on_click=home.refresh)
    elif feed.loaded and not feed.donations:
        solara.Text(strings.get("home_empty"), style={"padding": "2rem"})
    else:
        with solara.Column(style={"paddingTop": "8px", "gap": "0"}):
            for donation in feed.donations:
                DonationTile(donation)
