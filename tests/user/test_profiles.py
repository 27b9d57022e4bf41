"""Tests for authkit/user/profiles.py - profile repository."""

import pytest

from authkit.auth.backend import BackendUser
from authkit.auth.exceptions import ProfileDataError


@pytest.mark.asyncio
async def test_create_then_fetch_round_trip(profiles):
    backend_user = BackendUser(uid="uid-1", email="jane@example.com")

    created = await profiles.create(backend_user, "Jane")
    fetched = await profiles.fetch("uid-1")

    assert fetched.id == created.id == "uid-1"
    assert fetched.email == "jane@example.com"
    assert fetched.display_name == "Jane"
    assert fetched.created_at <= fetched.updated_at


@pytest.mark.asyncio
async def test_fetch_missing_profile(profiles):
    with pytest.raises(ProfileDataError) as exc_info:
        await profiles.fetch("ghost")
    assert exc_info.value.message == "Profile record missing for user ghost"


@pytest.mark.asyncio
async def test_fetch_malformed_profile(profiles, store):
    await store.set("uid-1", {"id": "uid-1", "email": "jane@example.com"})

    with pytest.raises(ProfileDataError) as exc_info:
        await profiles.fetch("uid-1")
    assert "fullName" in exc_info.value.message


class TestUpsert:
    @pytest.mark.asyncio
    async def test_twice_yields_one_record(self, profiles, store):
        first = await profiles.upsert(
            "uid-1",
            email="g@example.com",
            display_name="Gina",
            default_display_name="Google User",
            verified_on_create=True,
        )
        second = await profiles.upsert(
            "uid-1",
            email="g@example.com",
            display_name="Gina",
            default_display_name="Google User",
            verified_on_create=True,
        )

        assert len(store) == 1
        assert second.created_at == first.created_at
        assert second.updated_at > first.updated_at
        assert first.created_at == first.updated_at

    @pytest.mark.asyncio
    async def test_create_uses_default_name_and_verification(self, profiles):
        user = await profiles.upsert(
            "uid-1",
            email="a@example.com",
            display_name=None,
            default_display_name="Apple User",
            verified_on_create=True,
        )

        assert user.display_name == "Apple User"
        assert user.is_email_verified is True
        assert user.profile_image_url is None

    @pytest.mark.asyncio
    async def test_update_keeps_fields_not_provided(self, profiles):
        await profiles.upsert(
            "uid-1",
            email="a@example.com",
            display_name="Jane",
            default_display_name="Apple User",
            profile_image_url="https://example.com/a.png",
        )

        user = await profiles.upsert(
            "uid-1",
            email="new@example.com",
            display_name=None,
            default_display_name="Apple User",
        )

        assert user.display_name == "Jane"
        assert user.email == "new@example.com"
        assert user.profile_image_url == "https://example.com/a.png"

    @pytest.mark.asyncio
    async def test_update_without_email_keeps_stored_email(self, profiles):
        await profiles.upsert(
            "uid-1",
            email="g@example.com",
            display_name="Gina",
            default_display_name="Google User",
        )

        user = await profiles.upsert(
            "uid-1",
            email=None,
            display_name=None,
            default_display_name="Google User",
        )

        assert user.email == "g@example.com"

    @pytest.mark.asyncio
    async def test_create_without_email_stores_empty_email(self, profiles):
        user = await profiles.upsert(
            "uid-1",
            email=None,
            display_name=None,
            default_display_name="Google User",
        )

        assert user.email == ""


@pytest.mark.asyncio
async def test_update_advances_timestamp(profiles):
    created = await profiles.create(BackendUser(uid="uid-1", email="j@example.com"), "Jane")

    updated = await profiles.update("uid-1", profile_image_url="https://example.com/j.png")

    assert updated.display_name == "Jane"
    assert updated.profile_image_url == "https://example.com/j.png"
    assert updated.updated_at > created.updated_at


@pytest.mark.asyncio
async def test_delete(profiles, store):
    await profiles.create(BackendUser(uid="uid-1", email="j@example.com"), "Jane")

    await profiles.delete("uid-1")

    assert len(store) == 0
    assert profiles.store is store
