"""Donation feed contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from donations_app.core import exceptions


@dataclass(frozen=True, slots=True)
class DonationImage:
    url: str


@dataclass(frozen=True, slots=True)
class Donation:
    """Single entry of the home screen feed."""

    id: str
    title: str
    description: str = ""
    images: tuple[DonationImage, ...] = field(default_factory=tuple)

    @property
    def cover_url(self) -> Optional[str]:
        return self.images[0].url if self.images else None

    @classmethod
    def from_payload(cls, payload: Any) -> "Donation":
        try:
            images = tuple(DonationImage(url=str(image["url"])) for image in payload.get("images") or ())
            return cls(
                id=str(payload["id"]),
                title=str(payload["title"]),
                description=str(payload.get("description") or ""),
                images=images,
            )
        except (AttributeError, KeyError, TypeError) as error:
            raise exceptions.GatewayError(
                code=exceptions.MALFORMED_PAYLOAD,
                message="Donation entry is missing required fields",
                details={"entry": payload},
            ) from error


def parse_donations(payload: Any) -> list[Donation]:
    """Accept either a bare list or a ``{"donations": [...]}`` envelope."""

    if isinstance(payload, dict):
        payload = payload.get("donations")
    if not isinstance(payload, list):
        raise exceptions.GatewayError(
            code=exceptions.MALFORMED_PAYLOAD,
            message="Donation feed must be a list",
        )
    return [Donation.from_payload(entry) for entry in payload]
