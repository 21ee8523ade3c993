"""Localized string lookup for screen copy and user-facing messages."""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from donations_app.core import exceptions
from donations_app.models.auth import ValidationError

DEFAULT_LOCALE = "en"

CATALOGS: Dict[str, Dict[str, str]] = {
    "en": {
        "login_title": "Login",
        "login_email": "Email",
        "login_password": "Password",
        "home_title": "Donations",
        "home_empty": "No donations available yet.",
        "home_logout": "Log out",
        "home_retry": "Try again",
        "validation_message_email_required": "Email is required",
        "validation_message_email_invalid": "Enter a valid email address",
        "validation_message_password_required": "Password is required",
        "validation_message_password_too_short": "Password must be at least {min_length} characters",
        "error_message_timeout": "The server took too long to answer. Try again.",
        "error_message_transport": "Could not reach the server. Check your connection.",
        "error_message_http_status": "The server rejected the request.",
        "error_message_malformed_payload": "The server sent an unexpected response.",
        "error_message_unexpected": "Something went wrong. Try again.",
    },
    "pt": {
        "login_title": "Entrar",
        "login_email": "E-mail",
        "login_password": "Senha",
        "home_title": "Doações",
        "home_empty": "Nenhuma doação disponível.",
        "home_logout": "Sair",
        "home_retry": "Tentar novamente",
        "validation_message_email_required": "Informe o e-mail",
        "validation_message_email_invalid": "E-mail inválido",
        "validation_message_password_required": "Informe a senha",
        "validation_message_password_too_short": "A senha deve ter pelo menos {min_length} caracteres",
        "error_message_unexpected": "Algo deu errado. Tente novamente.",
    },
}


class Strings:
    """Resolve keys for one locale, falling back to English and then the key."""

    def __init__(
        self,
        locale: str = DEFAULT_LOCALE,
        *,
        catalogs: Optional[Mapping[str, Mapping[str, str]]] = None,
        min_password_length: int = 8,
    ) -> None:
        self._catalogs = catalogs or CATALOGS
        self.locale = self._resolve_locale(locale)
        self._min_password_length = min_password_length

    def _resolve_locale(self, locale: str) -> str:
        candidate = (locale or DEFAULT_LOCALE).replace("_", "-").lower()
        if candidate in self._catalogs:
            return candidate
        language = candidate.split("-", 1)[0]
        return language if language in self._catalogs else DEFAULT_LOCALE

    def get(self, key: str, **params: object) -> str:
        template = self._lookup(key)
        if template is None:
            return key
        if params:
            return template.format(**params)
        return template

    def _lookup(self, key: str) -> Optional[str]:
        for locale in (self.locale, DEFAULT_LOCALE):
            catalog = self._catalogs.get(locale, {})
            if key in catalog:
                return catalog[key]
        return None

    def validation_message(self, error: ValidationError) -> str:
        return self.get(error.message_key, min_length=self._min_password_length)

    def error_message(self, cause: Optional[exceptions.GatewayError]) -> str:
        code = cause.code if cause is not None else exceptions.UNEXPECTED
        key = f"error_message_{code}"
        if self._lookup(key) is None:
            key = f"error_message_{exceptions.UNEXPECTED}"
        return self.get(key)
