import pytest

from ask_philip.domain.exceptions import ApiError, NetworkError, RateLimitError
from ask_philip.gui.presenter import (
    GENERIC_ERROR_FALLBACK,
    RATE_LIMIT_NOTICE,
    format_error,
    is_error_content,
)


@pytest.mark.parametrize(
    "message",
    ["429 Too Many Requests", "You exceeded your current quota", "status 429"],
)
def test_rate_limit_text_is_rewritten(message):
    assert format_error(ApiError(code="API_ERROR", message=message)) == f"**Note:** {RATE_LIMIT_NOTICE}"


def test_quota_match_is_case_sensitive():
    err = ApiError(code="API_ERROR", message="QUOTA exceeded")
    assert format_error(err) == "**Note:** QUOTA exceeded"


def test_rate_limit_kind_wins_over_text():
    err = RateLimitError(code="RATE_LIMIT", message="slow down", http_status=429)
    assert format_error(err) == f"**Note:** {RATE_LIMIT_NOTICE}"


def test_other_message_is_verbatim():
    err = NetworkError(code="NETWORK_ERROR", message="Name or service not known")
    assert format_error(err) == "**Note:** Name or service not known"


def test_plain_exception_message():
    assert format_error(RuntimeError("boom")) == "**Note:** boom"


def test_fallback_when_no_message():
    assert format_error(ApiError(code="API_ERROR", message="")) == f"**Note:** {GENERIC_ERROR_FALLBACK}"
    assert format_error(RuntimeError()) == f"**Note:** {GENERIC_ERROR_FALLBACK}"


def test_is_error_content():
    assert is_error_content(format_error(RuntimeError("x")))
    assert not is_error_content("No, they are incompatible.")
