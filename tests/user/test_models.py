"""Tests for authkit/user/models.py."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from authkit.auth.backend import BackendUser
from authkit.auth.exceptions import AuthErrorKind, ProfileDataError
from authkit.user.models import User

NOW = datetime(2024, 5, 1, 12, 30, tzinfo=UTC)


def _document(**overrides):
    document = {
        "id": "uid-1",
        "email": "jane@example.com",
        "fullName": "Jane",
        "createdAt": NOW,
        "updatedAt": NOW,
        "profileImageUrl": None,
        "isEmailVerified": False,
    }
    document.update(overrides)
    return document


class TestFromDocument:
    def test_reads_camel_case_keys(self):
        user = User.from_document(_document(profileImageUrl="https://example.com/a.png"))

        assert user.id == "uid-1"
        assert user.display_name == "Jane"
        assert user.created_at == NOW
        assert user.profile_image_url == "https://example.com/a.png"
        assert user.is_email_verified is False

    def test_profile_image_is_optional(self):
        document = _document()
        del document["profileImageUrl"]
        assert User.from_document(document).profile_image_url is None

    @pytest.mark.parametrize(
        "missing", ["id", "email", "fullName", "createdAt", "updatedAt", "isEmailVerified"]
    )
    def test_missing_field_is_data_error(self, missing):
        document = _document()
        del document[missing]

        with pytest.raises(ProfileDataError) as exc_info:
            User.from_document(document)

        assert exc_info.value.kind is AuthErrorKind.unknown
        assert missing in exc_info.value.message

    def test_malformed_field_is_not_coerced(self):
        with pytest.raises(ProfileDataError) as exc_info:
            User.from_document(_document(createdAt="not a timestamp"))
        assert "createdAt" in exc_info.value.message

    def test_empty_display_name_is_rejected(self):
        with pytest.raises(ProfileDataError):
            User.from_document(_document(fullName=""))


def test_document_round_trip():
    user = User.from_document(_document())
    assert user.to_document() == _document()


def test_display_name_is_stored_as_full_name():
    user = User(
        id="uid-1",
        email="jane@example.com",
        display_name="Jane",
        created_at=NOW,
        updated_at=NOW,
        is_email_verified=False,
    )

    document = user.to_document()

    assert document["fullName"] == "Jane"
    assert "displayName" not in document


def test_equality_uses_id_only():
    a = User.from_document(_document())
    b = User.from_document(_document(fullName="Someone Else", updatedAt=datetime.now(UTC)))
    c = User.from_document(_document(id="uid-2"))

    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2


def test_user_is_immutable():
    user = User.from_document(_document())
    with pytest.raises(ValidationError):
        user.display_name = "Other"


def test_from_backend_user():
    backend_user = BackendUser(
        uid="uid-9",
        email="b@example.com",
        photo_url="https://example.com/b.png",
        email_verified=True,
        created_at=datetime(2023, 1, 1, tzinfo=UTC),
    )

    user = User.from_backend_user(backend_user, "Bea", now=NOW)

    assert user.id == "uid-9"
    assert user.display_name == "Bea"
    assert user.created_at == datetime(2023, 1, 1, tzinfo=UTC)
    assert user.updated_at == NOW
    assert user.is_email_verified is True
