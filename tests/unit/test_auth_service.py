"""Tests for password hashing, sign-up and sign-in."""

from uuid import uuid4

import pytest

from conftest import profile_row
from digishop.errors import AuthenticationError, BackendError, ValidationError
from digishop.services.auth_service import (
    PASSWORD_HASH_METHOD,
    AuthService,
    hash_password,
    verify_password,
)

FAST_METHOD = "pbkdf2:sha256:1000"


class TestPasswordHashing:
    def test_verify_own_hash(self):
        stored = hash_password("secret1", FAST_METHOD)
        assert verify_password("secret1", stored)
        assert not verify_password("secret2", stored)

    def test_default_method(self):
        stored = hash_password("secret1")
        assert stored.startswith(PASSWORD_HASH_METHOD)
        assert "secret1" not in stored
        assert verify_password("secret1", stored)

    def test_hash_format(self):
        method, salt, digest = hash_password("pw", FAST_METHOD).split("$")
        assert method == FAST_METHOD
        assert salt
        assert len(digest) == 64

    def test_random_salt(self):
        assert hash_password("pw", FAST_METHOD) != hash_password("pw", FAST_METHOD)

    @pytest.mark.parametrize("stored", [
        "",
        "plain",
        "md5$salt$abc",
        "pbkdf2:sha256:abc$salt$digest",
        "pbkdf2_sha256$abc$salt$digest",
    ])
    def test_corrupt_hash_never_matches(self, stored):
        assert not verify_password("pw", stored)


class TestSignUp:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password,name", [
        ("not-an-email", "secret1", "User"),
        ("u@example.com", "short", "User"),
        ("u@example.com", "secret1", "   "),
    ])
    async def test_rejects_invalid_input(self, db, tx, email, password, name):
        with pytest.raises(ValidationError):
            await AuthService(db).sign_up(email, password, name)
        tx.fetchval.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_creates_identity_and_profile(self, db, tx):
        user_id = uuid4()
        tx.fetchval.return_value = user_id
        tx.fetchrow.return_value = profile_row(id=user_id, email="new@example.com", full_name="New User")

        session = await AuthService(db).sign_up(" New@Example.com ", "secret1", " New User ")

        email, password_hash = tx.fetchval.await_args.args[1:]
        assert email == "new@example.com"
        assert verify_password("secret1", password_hash)
        assert tx.fetchrow.await_args.args[1:] == (user_id, "new@example.com", "New User")
        assert tx.committed
        assert session.user_id == user_id
        assert session.profile.full_name == "New User"
        assert not session.is_admin

    @pytest.mark.asyncio
    async def test_profile_failure_rolls_back(self, db, tx):
        tx.fetchval.return_value = uuid4()
        tx.fetchrow.side_effect = BackendError("insert failed")

        with pytest.raises(BackendError):
            await AuthService(db).sign_up("u@example.com", "secret1", "User")
        assert tx.rolled_back
        assert not tx.committed


class TestSignIn:
    @pytest.mark.asyncio
    async def test_unknown_email(self, db):
        with pytest.raises(AuthenticationError, match="Invalid login credentials"):
            await AuthService(db).sign_in("nobody@example.com", "secret1")

    @pytest.mark.asyncio
    async def test_wrong_password(self, db):
        db.fetchrow.return_value = {
            "id": uuid4(),
            "email": "u1@example.com",
            "password_hash": hash_password("secret1", FAST_METHOD),
        }
        with pytest.raises(AuthenticationError):
            await AuthService(db).sign_in("u1@example.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_success_loads_profile(self, db):
        user_id = uuid4()
        db.fetchrow.side_effect = [
            {
                "id": user_id,
                "email": "u1@example.com",
                "password_hash": hash_password("secret1", FAST_METHOD),
            },
            profile_row(id=user_id, is_admin=True),
        ]

        session = await AuthService(db).sign_in("U1@example.com", "secret1")

        assert db.fetchrow.await_args_list[0].args[1] == "u1@example.com"
        assert session.user_id == user_id
        assert session.is_admin
