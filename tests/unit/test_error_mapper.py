from kjoreskole_admin.app.infrastructure.errors.error_mapper import ErrorMapper
from kjoreskole_admin.clients.kjoreskole_sdk.errors import ApiError


def test_status_hint_overrides_backend_code() -> None:
    payload = ErrorMapper.to_payload(ApiError(code="HTTP_ERROR", message="Forbidden", trace_id="abc", status_code=403))

    assert payload["code"] == "PERMISSION_DENIED"
    assert payload["trace_id"] == "abc"
    assert payload["suggestion"]


def test_any_5xx_maps_to_internal_error() -> None:
    payload = ErrorMapper.to_payload(ApiError(code="X", message="bad gateway", status_code=502))

    assert payload["code"] == "INTERNAL_ERROR"


def test_transport_codes_without_status_use_known_messages() -> None:
    payload = ErrorMapper.to_payload(ApiError(code="TIMEOUT_ERROR", message="slow"))

    assert payload["code"] == "TIMEOUT_ERROR"
    assert payload["message"] == "Serveren brukte for lang tid på å svare."


def test_unknown_code_keeps_backend_message() -> None:
    payload = ErrorMapper.to_payload(ApiError(code="RATE_LIMITED", message="Vent litt", status_code=429))

    assert payload["code"] == "RATE_LIMITED"
    assert payload["message"] == "Vent litt"


def test_non_api_errors_become_internal_error() -> None:
    payload = ErrorMapper.to_payload(RuntimeError("boom"))

    assert payload["code"] == "INTERNAL_ERROR"
    assert payload["message"] == "boom"
    assert ErrorMapper.to_display_message(RuntimeError("boom")) == "[INTERNAL_ERROR] boom (trace_id=None)"
