import pytest
from sqlalchemy.exc import IntegrityError

from models.User import User
from schemas import ErrorCode, ExternalIdentity
from services import follow_service, identity_service
from utils.errors import UserNotFoundError


def _identity(uid="firebase-1", email="ada@example.com", **kwargs):
    return ExternalIdentity(uid=uid, email=email, **kwargs)


def test_resolve_is_idempotent(db):
    identity = _identity(name="Ada Lovelace")

    first = identity_service.resolve_or_provision_user(db, identity)
    second = identity_service.resolve_or_provision_user(db, identity)

    assert first.id == second.id
    assert db.query(User).count() == 1


def test_username_defaults_to_email_local_part(db):
    user = identity_service.resolve_or_provision_user(db, _identity(picture="https://img/ada.png"))

    assert user.username == "ada"
    assert user.image_url == "https://img/ada.png"


def test_provider_username_wins_over_email(db):
    user = identity_service.resolve_or_provision_user(db, _identity(username="countess"))
    assert user.username == "countess"


def test_taken_username_gets_a_suffix(db, make_user):
    make_user("ada")

    user = identity_service.resolve_or_provision_user(db, _identity(uid="firebase-2", email="ada@other.org"))

    assert user.username != "ada"
    assert user.username.startswith("ada_")


def test_identity_with_taken_email_is_not_provisioned(db, make_user):
    make_user("ada")
    identity = _identity(uid="uid-ada-new", email="ada@example.com")

    with pytest.raises(IntegrityError):
        identity_service.resolve_or_provision_user(db, identity)

    # The session was rolled back and stays usable
    assert db.query(User).count() == 1
    assert identity_service.get_user_by_firebase_uid(db, "uid-ada-new") is None


def test_sync_user_with_taken_email(db, make_user):
    make_user("ada")

    result = identity_service.sync_user(db, _identity(uid="uid-ada-new", email="ada@example.com"))

    assert not result.success
    assert result.error == ErrorCode.INVALID_OPERATION
    assert db.query(User).count() == 1


def test_current_user_id_without_identity_is_none(db):
    assert identity_service.current_internal_user_id(db, None) is None


def test_current_user_id_for_unknown_identity_raises(db):
    with pytest.raises(UserNotFoundError):
        identity_service.current_internal_user_id(db, _identity())


def test_current_user_id_for_known_identity(db, make_user):
    user = make_user("grace")
    identity = _identity(uid=user.firebase_uid, email=user.email)

    assert identity_service.current_internal_user_id(db, identity) == user.id


def test_sync_user_requires_identity(db):
    result = identity_service.sync_user(db, None)

    assert not result.success
    assert result.error == ErrorCode.UNAUTHENTICATED


def test_get_user_by_external_id_includes_counts(db, make_user, make_post):
    ada = make_user("ada")
    bob = make_user("bob")
    make_post(ada)
    make_post(ada)
    follow_service.toggle_follow(db, bob.id, ada.id)

    result = identity_service.get_user_by_external_id(db, ada.firebase_uid)

    assert result.success
    assert result.data.posts_count == 2
    assert result.data.followers_count == 1
    assert result.data.following_count == 0


def test_get_user_by_external_id_unknown(db):
    result = identity_service.get_user_by_external_id(db, "nobody")
    assert result.success
    assert result.data is None
