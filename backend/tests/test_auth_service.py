"""
Idea Hub Backend — Auth Service Tests
======================================

Registration stores a bcrypt hash; login checks it.
"""

import pytest

from ideahub.exceptions import AuthenticationError, NotFoundError, ValidationError
from ideahub.models import User
from ideahub.schemas.user import SigninRequest, SignupRequest
from ideahub.security import decode_access_token
from ideahub.services.auth_service import auth_service


def _signup(**overrides):
    data = {"email": "Alice@Example.com", "password": "correct horse", "username": "alice"}
    data.update(overrides)
    return SignupRequest(**data)


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_persists_hash(self, db_manager):
        async with db_manager.session() as db:
            result = await auth_service.register(db, _signup(full_name="Alice A."))

        assert result.user.email == "alice@example.com"
        assert result.user.full_name == "Alice A."
        assert decode_access_token(result.token).user_id == result.user.id
        async with db_manager.session() as db:
            stored = await db.get(User, result.user.id)
        assert stored.password_hash and stored.password_hash != "correct horse"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, db_manager):
        async with db_manager.session() as db:
            await auth_service.register(db, _signup())
        async with db_manager.session() as db:
            with pytest.raises(ValidationError, match="Email already in use"):
                await auth_service.register(db, _signup(username="other"))

    @pytest.mark.asyncio
    async def test_duplicate_username(self, db_manager):
        async with db_manager.session() as db:
            await auth_service.register(db, _signup())
        async with db_manager.session() as db:
            with pytest.raises(ValidationError, match="Username already taken"):
                await auth_service.register(db, _signup(email="new@example.com"))

    @pytest.mark.asyncio
    async def test_missing_fields(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await auth_service.register(mock_db_session, SignupRequest(email="a@b.c"))
        assert exc_info.value.context["missing"] == ["password", "username"]
        mock_db_session.execute.assert_not_awaited()


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_checks_password(self, db_manager):
        async with db_manager.session() as db:
            await auth_service.register(db, _signup())

        async with db_manager.session() as db:
            ok = await auth_service.login(db, SigninRequest(email="alice@example.com", password="correct horse"))
            assert ok.user.username == "alice"
            with pytest.raises(AuthenticationError, match="Invalid email or password"):
                await auth_service.login(db, SigninRequest(email="alice@example.com", password="wrong"))
            with pytest.raises(AuthenticationError, match="Invalid email or password"):
                await auth_service.login(db, SigninRequest(email="nobody@example.com", password="x"))

    @pytest.mark.asyncio
    async def test_account_without_hash_cannot_login(self, db_manager, make_user):
        await make_user("seeded")
        async with db_manager.session() as db:
            with pytest.raises(AuthenticationError):
                await auth_service.login(db, SigninRequest(email="seeded@example.com", password="guess"))


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_missing_user(self, db_manager):
        async with db_manager.session() as db:
            with pytest.raises(NotFoundError):
                await auth_service.get_current_user(db, "ghost")
