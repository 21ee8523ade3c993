"""Application bar shared by the login and home screens."""

from __future__ import annotations

from typing import Callable, Optional

import solara


@solara.component
def AppBar(title: str, actions: Optional[Callable[[], None]] = None) -> None:
    with solara.Row(
        classes=["da-app-bar"],
        style={"justifyContent": "space-between", "alignItems": "center"},
    ):
        solara.Text(title, classes=["da-app-bar-title"])
        if actions is not None:
            with solara.Row(style={"gap": "0.5rem"}):
                actions()
