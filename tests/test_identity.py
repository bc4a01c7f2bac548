import pytest
from starlette.requests import Request

from workout_log_service.config import Settings
from workout_log_service.identity import FirebaseIdentityOracle, HeaderIdentityOracle, build_identity_oracle


def _request(headers=None, cookies=None) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        raw_headers.append((b"cookie", "; ".join(f"{k}={v}" for k, v in cookies.items()).encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw_headers, "query_string": b""})


async def test_header_oracle_reads_user_id():
    oracle = HeaderIdentityOracle("X-User-Id")

    assert await oracle.resolve(_request({"X-User-Id": "abc"})) == "abc"
    assert await oracle.resolve(_request({"X-User-Id": "   "})) is None
    assert await oracle.resolve(_request()) is None


async def test_firebase_oracle_without_token_is_anonymous():
    oracle = FirebaseIdentityOracle(None)

    # No token means no verification call and no credentials needed
    assert await oracle.resolve(_request()) is None


def test_firebase_oracle_token_sources():
    oracle = FirebaseIdentityOracle(None, cookie_name="session")

    assert oracle._extract_token(_request({"Authorization": "Bearer tok-1"})) == "tok-1"
    assert oracle._extract_token(_request(cookies={"session": "tok-2"})) == "tok-2"
    assert oracle._extract_token(_request({"Authorization": "Basic xyz"})) is None


async def test_firebase_oracle_requires_credentials_once_a_token_arrives():
    oracle = FirebaseIdentityOracle(None)

    with pytest.raises(RuntimeError):
        await oracle.resolve(_request({"Authorization": "Bearer tok"}))


def test_build_identity_oracle_by_mode():
    header = build_identity_oracle(Settings(AUTH_MODE="header", USER_ID_HEADER="X-Test-User"))
    firebase = build_identity_oracle(Settings(AUTH_MODE="firebase", SESSION_COOKIE_NAME="fb"))

    assert isinstance(header, HeaderIdentityOracle)
    assert header.header_name == "X-Test-User"
    assert isinstance(firebase, FirebaseIdentityOracle)
    assert firebase.cookie_name == "fb"
