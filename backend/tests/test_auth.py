import time

import jwt
import pytest

from services.auth import CLOCK_SKEW_SECONDS, authenticate, bearer_token
from services.errors import AuthenticationError, ConfigurationError

SECRET = "unit-test-secret"


def _token(**claims) -> str:
    now = int(time.time())
    payload = {"sub": "user-7", "aud": "authenticated", "exp": now + 600}
    payload.update(claims)
    return jwt.encode({k: v for k, v in payload.items() if v is not None}, SECRET, algorithm="HS256")


def test_valid_token_identifies_caller() -> None:
    caller = authenticate(f"Bearer {_token()}", secret=SECRET, audience="authenticated")
    assert caller.user_id == "user-7"


def test_scheme_is_case_insensitive() -> None:
    assert authenticate(f"bearer {_token()}", secret=SECRET).user_id == "user-7"


@pytest.mark.parametrize("header", [None, "", "   ", "Basic abc", "Bearer", "Bearer   "])
def test_missing_or_malformed_header(header: str | None) -> None:
    with pytest.raises(AuthenticationError, match="Not authenticated"):
        bearer_token(header)


def test_small_clock_skew_is_tolerated() -> None:
    token = _token(exp=int(time.time()) - CLOCK_SKEW_SECONDS // 2)
    assert authenticate(f"Bearer {token}", secret=SECRET).user_id == "user-7"


@pytest.mark.parametrize(
    "token",
    [
        _token(exp=int(time.time()) - 3600),
        _token(sub=None),
        _token(exp=None),
        jwt.encode({"sub": "user-7", "exp": int(time.time()) + 600}, "wrong-secret", algorithm="HS256"),
    ],
)
def test_rejected_tokens(token: str) -> None:
    with pytest.raises(AuthenticationError) as excinfo:
        authenticate(f"Bearer {token}", secret=SECRET)
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "User authentication failed"


def test_audience_mismatch_is_rejected() -> None:
    with pytest.raises(AuthenticationError):
        authenticate(f"Bearer {_token(aud='anon')}", secret=SECRET, audience="authenticated")


def test_missing_secret_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        authenticate(f"Bearer {_token()}", secret="")
    assert excinfo.value.status_code == 503
