from __future__ import annotations

import pytest
from pydantic import ValidationError
from webhooks_api.core.config import Settings

from shared.contracts import SignatureScheme


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MERCADOPAGO_WEBHOOK_SECRET", "whsec-env")
    monkeypatch.setenv("WEBHOOK_SIGNATURE_SCHEME", "manifest")
    monkeypatch.setenv("WEBHOOK_MAX_BODY_BYTES", "4096")
    monkeypatch.setenv("MERCADOPAGO_ACCESS_TOKEN", "APP_USR-1")

    settings = Settings(_env_file=None)

    assert settings.mercadopago_webhook_secret == "whsec-env"
    assert settings.webhook_signature_scheme == SignatureScheme.MANIFEST
    assert settings.webhook_max_body_bytes == 4096
    assert settings.payment_lookup_enabled is True


def test_settings_defaults_leave_webhook_unconfigured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MERCADOPAGO_WEBHOOK_SECRET", raising=False)
    monkeypatch.delenv("MERCADOPAGO_ACCESS_TOKEN", raising=False)

    settings = Settings(_env_file=None)

    assert settings.mercadopago_webhook_secret is None
    assert settings.webhook_signature_scheme == SignatureScheme.HEX
    assert settings.webhook_max_body_bytes == 1024 * 1024
    assert settings.payment_lookup_enabled is False
    assert settings.api_auth_enabled is False


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("webhook_max_body_bytes", 10),
        ("order_update_max_attempts", 0),
        ("processed_event_retention_days", 0),
        ("mercadopago_timeout_seconds", 0),
        ("webhook_signature_scheme", "base64"),
    ],
)
def test_settings_reject_out_of_range_values(field: str, value: object) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})
