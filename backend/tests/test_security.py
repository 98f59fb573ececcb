from datetime import timedelta

import pytest
from jose import jwt

from engagement.core.config import settings
from engagement.core.security import ADMIN_SCOPE, create_access_token, decode_access_token, user_id_from_token


def test_user_token_round_trip():
    token = create_access_token(42)
    assert user_id_from_token(token) == 42
    assert decode_access_token(token)["type"] == "access"


def test_expired_token_rejected():
    token = create_access_token(42, expires_delta=timedelta(seconds=-5))
    with pytest.raises(ValueError, match="expired"):
        decode_access_token(token)


def test_refresh_token_rejected():
    token = jwt.encode(
        {"sub": "42", "type": "refresh"},
        settings.security.JWT_SECRET_KEY.get_secret_value(),
        algorithm=settings.security.JWT_ALGORITHM,
    )
    with pytest.raises(ValueError):
        user_id_from_token(token)


def test_foreign_signature_rejected():
    token = jwt.encode({"sub": "42", "type": "access"}, "another-secret", algorithm="HS256")
    with pytest.raises(ValueError, match="Invalid token"):
        decode_access_token(token)


def test_admin_session_token_is_not_a_user():
    token = create_access_token(settings.security.ADMIN_USERNAME, scope=ADMIN_SCOPE)
    assert decode_access_token(token)["scope"] == ADMIN_SCOPE
    with pytest.raises(ValueError):
        user_id_from_token(token)
