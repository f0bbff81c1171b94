from evoting.security import (
    ADMIN_ROLE,
    VOTER_ROLE,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = hash_password("1234")
    assert hashed != "1234"
    assert verify_password("1234", hashed)
    assert not verify_password("4321", hashed)


def test_token_is_bound_to_its_role():
    token = create_access_token({"sub": "7", "role": VOTER_ROLE})
    assert decode_access_token(token, VOTER_ROLE) == 7
    assert decode_access_token(token, ADMIN_ROLE) is None


def test_expired_or_garbled_tokens_are_rejected():
    expired = create_access_token({"sub": "1", "role": ADMIN_ROLE}, expires_minutes=-1)
    assert decode_access_token(expired, ADMIN_ROLE) is None
    assert decode_access_token("not-a-token", ADMIN_ROLE) is None
