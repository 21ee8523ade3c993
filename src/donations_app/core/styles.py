"""Helpers for loading the global stylesheet."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import solara

_BASE = Path(__file__).resolve().parent.parent
CSS_ASSETS = [
    _BASE / "ui" / "styles" / "app.css",
]


@solara.component
def GlobalStyles(extra_assets: Iterable[Path] = ()) -> None:
    """Inject CSS assets into the current Solara document."""

    for asset in [*CSS_ASSETS, *(Path(path) for path in extra_assets)]:
        if asset.exists():
            solara.Style(asset)
