from grama_common.errors import (
    CodeMismatch,
    GramaError,
    InternalError,
    InvalidPhoneFormat,
    NotAuthenticated,
    NotFound,
    RetryLimitExceeded,
    ValidationError,
    error_from_payload,
)


def test_payload():
    assert CodeMismatch().to_payload() == {"success": False, "error": "Invalid OTP", "code": "CodeMismatch"}


def test_status_codes():
    assert InvalidPhoneFormat.status_code == 400
    assert RetryLimitExceeded.status_code == 429
    assert NotAuthenticated.status_code == 401
    assert InternalError.status_code == 500
    assert NotFound.status_code == 404


def test_hierarchy():
    assert isinstance(InvalidPhoneFormat(), ValidationError)
    assert isinstance(CodeMismatch(), GramaError)


def test_known_code_is_rebuilt():
    error = error_from_payload({"success": False, "error": "Too many tries", "code": "RetryLimitExceeded"}, 429)

    assert isinstance(error, RetryLimitExceeded)
    assert error.message == "Too many tries"


def test_unknown_code_falls_back_by_status():
    assert isinstance(error_from_payload({"code": "Teapot"}, 503), InternalError)

    error = error_from_payload({"detail": "Not Found"}, 404)
    assert type(error) is GramaError
    assert error.status_code == 404
    assert error.message == "Not Found"


def test_missing_body():
    error = error_from_payload(None, 400)

    assert error.message == "Request failed with status 400"
