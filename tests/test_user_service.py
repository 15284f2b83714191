import pytest

from app.core.errors import DuplicateEmail, InvalidInput, NotFound
from app.core.security import verify_password
from app.models import UserCreate, UserResponse, UserUpdate
from app.services.user_service import UserService


class TestCreate:
    async def test_creates_user_with_hashed_password(self, db):
        user = await UserService.create(
            UserCreate(email="alice@example.com", password="secret1", name="  Alice "), db
        )
        assert user.id
        assert user.name == "Alice"
        assert user.password_hash != "secret1"
        assert verify_password("secret1", user.password_hash)

    async def test_response_has_no_password(self, alice):
        body = UserResponse.model_validate(alice).model_dump()
        assert "password" not in body
        assert "password_hash" not in body

    @pytest.mark.parametrize("name", ["Alice", "Someone Else"])
    async def test_duplicate_email_rejected(self, db, alice, name):
        with pytest.raises(DuplicateEmail):
            await UserService.create(
                UserCreate(email="alice@example.com", password="other-pass", name=name), db
            )

    async def test_unique_index_violation_is_duplicate_email(self, db, alice, monkeypatch):
        async def lookup_misses(email, db):
            return None

        monkeypatch.setattr(UserService, "find_by_email", staticmethod(lookup_misses))
        with pytest.raises(DuplicateEmail):
            await UserService.create(
                UserCreate(email="alice@example.com", password="secret1", name="Twin"), db
            )

    async def test_blank_name_rejected(self, db):
        with pytest.raises(InvalidInput):
            await UserService.create(
                UserCreate(email="carol@example.com", password="secret1", name="   "), db
            )


class TestLookup:
    async def test_find_by_id(self, db, alice):
        found = await UserService.find_by_id(alice.id, db)
        assert found.email == "alice@example.com"

    async def test_find_by_id_missing(self, db):
        with pytest.raises(NotFound):
            await UserService.find_by_id("nope", db)

    async def test_find_by_email(self, db, alice):
        assert (await UserService.find_by_email("alice@example.com", db)).id == alice.id
        assert await UserService.find_by_email("ALICE@example.com", db) is None


class TestUpdate:
    async def test_updates_name_and_rehashes_password(self, db, alice):
        old_hash = alice.password_hash
        user = await UserService.update(
            alice.id, UserUpdate(name="Alice B", password="newsecret"), db
        )
        assert user.name == "Alice B"
        assert user.password_hash != old_hash
        assert verify_password("newsecret", user.password_hash)
        assert user.updated_at is not None

    async def test_email_taken_by_other_user(self, db, alice, bob):
        with pytest.raises(DuplicateEmail):
            await UserService.update(bob.id, UserUpdate(email="alice@example.com"), db)

    async def test_keeping_own_email_is_allowed(self, db, alice):
        user = await UserService.update(alice.id, UserUpdate(email="alice@example.com"), db)
        assert user.email == "alice@example.com"

    async def test_missing_user(self, db):
        with pytest.raises(NotFound):
            await UserService.update("nope", UserUpdate(name="X"), db)


class TestRemove:
    async def test_second_remove_fails(self, db, alice):
        await UserService.remove(alice.id, db)
        with pytest.raises(NotFound):
            await UserService.remove(alice.id, db)
