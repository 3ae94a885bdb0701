from datetime import UTC, datetime, timedelta
from uuid import uuid4

from src.api.auth_utils import create_access_token, decode_access_token, profile_from_claims


def test_token_round_trip():
    token = create_access_token({"sub": "abc"})

    payload = decode_access_token(token)

    assert payload["sub"] == "abc"
    assert "exp" in payload


def test_expired_token_is_rejected():
    issued = datetime.now(UTC) - timedelta(days=2)
    token = create_access_token({"sub": "abc"}, timedelta(minutes=5), now_utc=issued)

    assert decode_access_token(token) is None


def test_garbage_token_is_rejected():
    assert decode_access_token("not-a-jwt") is None


def test_algorithm_mismatch_is_rejected():
    token = create_access_token({"sub": "abc"})

    assert decode_access_token(token, algorithm="HS512") is None


def test_profile_from_claims():
    user_id = uuid4()
    profile = profile_from_claims(
        {
            "sub": str(user_id),
            "email": "ada@example.com",
            "app_metadata": {"role": "admin"},
            "user_metadata": {"full_name": "Ada Obi", "email_verified": True},
        }
    )

    assert profile.id == user_id
    assert profile.role == "admin"
    assert profile.full_name == "Ada Obi"
    assert profile.email_verified is True


def test_profile_defaults_to_customer():
    profile = profile_from_claims({"sub": str(uuid4()), "email": "ada@example.com"})

    assert profile.role == "customer"


def test_unusable_claims():
    assert profile_from_claims({"sub": "not-a-uuid", "email": "a@b.c"}) is None
    assert profile_from_claims({"sub": str(uuid4())}) is None
    assert profile_from_claims(
        {"sub": str(uuid4()), "email": "a@b.c", "app_metadata": {"role": "owner"}}
    ) is None
