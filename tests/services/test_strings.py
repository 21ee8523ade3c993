from donations_app.core.exceptions import GatewayError
from donations_app.models.auth import ValidationError
from donations_app.services.strings import Strings


def test_validation_messages_are_localized():
    strings = Strings("pt-BR")
    assert strings.locale == "pt"
    assert strings.validation_message(ValidationError.EMAIL_INVALID) == "E-mail inválido"
    assert strings.validation_message(ValidationError.PASSWORD_TOO_SHORT).endswith("8 caracteres")


def test_missing_keys_fall_back_to_english_then_key():
    strings = Strings("pt")
    assert strings.get("error_message_timeout") == "The server took too long to answer. Try again."
    assert strings.get("unknown_key") == "unknown_key"
    assert Strings("de").locale == "en"


def test_error_message_per_cause_code():
    strings = Strings("en")
    assert strings.error_message(GatewayError(code="transport", message="x")).startswith("Could not reach")
    assert strings.error_message(GatewayError(code="brand_new", message="x")) == "Something went wrong. Try again."
    assert strings.error_message(None) == "Something went wrong. Try again."


def test_password_hint_uses_configured_minimum():
    strings = Strings("en", min_password_length=10)
    assert strings.validation_message(ValidationError.PASSWORD_TOO_SHORT) == (
        "Password must be at least 10 characters"
    )
