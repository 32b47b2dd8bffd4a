"""Unit tests for the error translation service."""

import httpx
import pytest
from pydantic import ValidationError

from marketplace_client.core.exceptions import (
    ApiError,
    EnvelopeError,
    InputValidationError,
    StorageError,
)
from marketplace_client.domain.entities.product import ProductDraft
from marketplace_client.domain.services.error_translation import classify, failure, translate
from marketplace_client.domain.value_objects.error import ErrorKind
from marketplace_client.utils.i18n import get_translated_message


class TestClassification:
    @pytest.mark.parametrize(
        "cause",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
        ],
    )
    def test_transport_failures_are_network(self, cause):
        assert classify(cause)[0] is ErrorKind.NETWORK

    @pytest.mark.parametrize(
        "status, kind",
        [
            (400, ErrorKind.VALIDATION),
            (422, ErrorKind.VALIDATION),
            (401, ErrorKind.INVALID_CREDENTIALS),
            (403, ErrorKind.INVALID_CREDENTIALS),
            (404, ErrorKind.NOT_FOUND),
            (408, ErrorKind.SERVER),
            (429, ErrorKind.SERVER),
            (500, ErrorKind.SERVER),
            (503, ErrorKind.SERVER),
            (418, ErrorKind.UNKNOWN),
        ],
    )
    def test_status_fallback(self, status, kind):
        assert classify(ApiError(status, "request failed"))[0] is kind

    def test_server_code_wins_over_status(self):
        error = ApiError(401, "Unauthorized", server_code="email_not_verified")

        assert classify(error)[0] is ErrorKind.EMAIL_NOT_VERIFIED

    @pytest.mark.parametrize(
        "message, kind",
        [
            ("Please verify your email first", ErrorKind.EMAIL_NOT_VERIFIED),
            ("Email not verified", ErrorKind.EMAIL_NOT_VERIFIED),
            ("OTP has expired", ErrorKind.OTP_EXPIRED),
            ("Invalid OTP", ErrorKind.OTP_INVALID),
            ("The verification code is incorrect", ErrorKind.OTP_INVALID),
        ],
    )
    def test_message_heuristics(self, message, kind):
        assert classify(ApiError(400, message))[0] is kind

    def test_validation_fields_come_from_errors(self):
        error = ApiError(422, "Validation failed", errors={"price": "must be positive"})

        kind, fields = classify(error)

        assert kind is ErrorKind.VALIDATION
        assert fields == {"price": "must be positive"}

    def test_success_false_on_http_200_is_classified(self):
        assert classify(ApiError(200, "Invalid credentials", server_code="INVALID_CREDENTIALS"))[0] is (
            ErrorKind.INVALID_CREDENTIALS
        )

    def test_envelope_mismatch_is_unknown(self):
        assert classify(EnvelopeError())[0] is ErrorKind.UNKNOWN

    def test_storage_error(self):
        assert classify(StorageError())[0] is ErrorKind.STORAGE

    def test_pydantic_validation_error_keeps_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            ProductDraft.model_validate({"title": "", "description": "x", "price": -1})

        kind, fields = classify(exc_info.value)

        assert kind is ErrorKind.VALIDATION
        assert {"title", "price", "location"} <= set(fields)

    def test_input_validation_error(self):
        kind, fields = classify(InputValidationError({"email": "Enter a valid email address."}))

        assert kind is ErrorKind.VALIDATION
        assert fields == {"email": "Enter a valid email address."}

    def test_anything_else_is_unknown(self):
        assert classify(RuntimeError("boom"))[0] is ErrorKind.UNKNOWN


class TestTranslate:
    def test_message_comes_from_catalog_not_server(self):
        error = translate(ApiError(500, "Traceback: secret internals"), "en")

        assert error.kind is ErrorKind.SERVER
        assert error.message == get_translated_message("error_server", "en")
        assert "secret" not in error.message

    def test_spanish_message(self):
        error = translate(httpx.ConnectError("down"), "es")

        assert error.message == get_translated_message("error_network", "es")
        assert error.message != get_translated_message("error_network", "en")

    def test_failure_wraps_in_err(self):
        result = failure(StorageError(), "en")

        assert not result.ok
        assert result.kind is ErrorKind.STORAGE
