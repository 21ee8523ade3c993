"""Remote collaborators performing login and donation fetches."""

from __future__ import annotations

import asyncio
from typing import List, Optional, Protocol

from donations_app.models.auth import LoginResult, UserProfile
from donations_app.models.donation import Donation, DonationImage, parse_donations

from .api import ApiClient
from .config import ClientSettings


class LoginGateway(Protocol):
    async def login(self, email: str, password: str) -> LoginResult:
        """Return the session token and profile or raise ``GatewayError``."""


class DonationGateway(Protocol):
    async def fetch_donations(self, token: Optional[str]) -> List[Donation]:
        """Return the donation feed or raise ``GatewayError``."""


class HttpLoginGateway:
    def __init__(self, client: ApiClient, *, path: str = "/login") -> None:
        self._client = client
        self._path = path

    async def login(self, email: str, password: str) -> LoginResult:
        response = await self._client.post(self._path, {"email": email, "password": password})
        response.raise_for_status()
        return LoginResult.from_payload(response.payload)


class HttpDonationGateway:
    def __init__(self, client: ApiClient, *, path: str = "/donations") -> None:
        self._client = client
        self._path = path

    async def fetch_donations(self, token: Optional[str]) -> List[Donation]:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        response = await self._client.get(self._path, headers=headers)
        response.raise_for_status()
        return parse_donations(response.payload)


class FakeLoginGateway:
    """Accepts any well-formed credentials after a short delay."""

    def __init__(self, *, latency_seconds: float = 0.5) -> None:
        self._latency = latency_seconds

    async def login(self, email: str, password: str) -> LoginResult:
        await asyncio.sleep(self._latency)
        user = UserProfile.fake()
        return LoginResult(token="token", user=UserProfile(user.id, user.name, email, user.image_url))


SAMPLE_DONATIONS = (
    Donation(
        id="1",
        title="Winter coats",
        description="Three adult coats in good condition, sizes M and L.",
        images=(DonationImage(url="https://picsum.photos/id/1011/300"),),
    ),
    Donation(
        id="2",
        title="Children's books",
        description="A box of illustrated books for ages 4 to 8.",
        images=(DonationImage(url="https://picsum.photos/id/1025/300"),),
    ),
    Donation(
        id="3",
        title="Kitchen set",
        description="Pots, pans and a set of plates for a new home.",
        images=(DonationImage(url="https://picsum.photos/id/1060/300"),),
    ),
)


class FakeDonationGateway:
    def __init__(self, donations=SAMPLE_DONATIONS, *, latency_seconds: float = 0.5) -> None:
        self._donations = list(donations)
        self._latency = latency_seconds

    async def fetch_donations(self, token: Optional[str]) -> List[Donation]:
        await asyncio.sleep(self._latency)
        return list(self._donations)


def uses_http(settings: ClientSettings) -> bool:
    return bool(settings.api_base_url) and not settings.use_fake_gateway


def build_gateways(
    settings: ClientSettings, *, client: Optional[ApiClient] = None
) -> tuple[LoginGateway, DonationGateway]:
    if not uses_http(settings):
        latency = settings.fake_latency_seconds
        return FakeLoginGateway(latency_seconds=latency), FakeDonationGateway(latency_seconds=latency)
    client = client or ApiClient(settings.api_base_url, timeout=settings.request_timeout_seconds)
    return HttpLoginGateway(client), HttpDonationGateway(client)
