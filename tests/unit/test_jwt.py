"""Unit tests for staff access token verification."""

import uuid
from datetime import timedelta

from academy.kernel.identity.jwt import JWTManager, StaffRole

SECRET = "unit-test-secret-key-0123456789-abcdef"


def _manager() -> JWTManager:
    return JWTManager(secret_key=SECRET, algorithm="HS256")


def test_round_trip_claims():
    staff_id = uuid.uuid4()
    token, expires, jti = _manager().create_access_token(
        staff_id=staff_id, email="cook@example.com", role=StaffRole.STAFF.value, name="Sam"
    )
    payload = _manager().verify_access_token(token)
    assert payload is not None
    assert payload.sub == str(staff_id)
    assert payload.role == "staff"
    assert payload.name == "Sam"
    assert payload.jti == jti


def test_wrong_secret_rejected():
    token, _, _ = _manager().create_access_token(uuid.uuid4(), "a@example.com", "staff")
    other = JWTManager(secret_key="another-secret-key-0123456789-abcdef", algorithm="HS256")
    assert other.verify_access_token(token) is None


def test_expired_token_rejected():
    token, _, _ = _manager().create_access_token(
        uuid.uuid4(), "a@example.com", "staff", expires_delta=timedelta(seconds=-5)
    )
    assert _manager().verify_access_token(token) is None


def test_garbage_rejected():
    assert _manager().verify_access_token("not-a-token") is None
