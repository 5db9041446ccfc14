"""
Tests unitaires taxonomie d'erreurs et Result.
"""

import pytest

from rhe_sso.core import (
    ApiError,
    AuthError,
    AuthTransportError,
    ErrorKind,
    MalformedResponseError,
    NotAttachedError,
    Result,
    SsoError,
    ValidationError,
)


class TestErrorKinds:
    """Chaque erreur porte son tag."""

    @pytest.mark.parametrize(
        "error, kind",
        [
            (ValidationError({"email": ["taken"]}), ErrorKind.VALIDATION),
            (NotAttachedError(), ErrorKind.NOT_ATTACHED),
            (AuthError("denied"), ErrorKind.AUTH),
            (AuthTransportError("down"), ErrorKind.AUTH_TRANSPORT),
            (ApiError(500, "boom"), ErrorKind.API),
            (MalformedResponseError(200, "<html>", "expected JSON"), ErrorKind.API),
        ],
    )
    def test_kind(self, error, kind):
        assert isinstance(error, SsoError)
        assert error.kind is kind

    def test_validation_error_exposes_fields(self):
        error = ValidationError({"email": ["The email has already been taken."]})
        assert error.fields == error.errors == {"email": ["The email has already been taken."]}

    def test_not_attached_default_reason(self):
        error = NotAttachedError()
        assert error.reason == "No token"
        assert error.status_code is None

    def test_api_error_message(self):
        error = ApiError(500, "boom")
        assert "500" in str(error)
        assert error.body == "boom"


class TestResult:
    """Tests type résultat."""

    def test_success_unwraps_value(self):
        result = Result.success({"id": 7})
        assert result.ok is True
        assert result.kind is None
        assert result.unwrap() == {"id": 7}

    def test_failure_raises_on_unwrap(self):
        error = AuthError("denied", data={"reason": "x"})
        result = Result.failure(error)

        assert result.ok is False
        assert result.kind is ErrorKind.AUTH
        with pytest.raises(AuthError) as exc_info:
            result.unwrap()
        assert exc_info.value is error
        assert exc_info.value.get_data() == {"reason": "x"}
