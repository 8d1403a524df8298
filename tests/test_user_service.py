from datetime import datetime, timedelta, timezone

import pytest

from avocado.domain.errors import AuthError, ConflictError, ForbiddenError, ValidationError
from avocado.infrastructure.persistence.sqlite import SQLiteDatabase
from avocado.infrastructure.repositories.user_repository import UserRepository
from avocado.services.user_service import AVATAR_COLORS, UserService

SECRET = "unit-test-secret-with-enough-length-for-hs256"


@pytest.fixture
def database(tmp_path):
    db = SQLiteDatabase(tmp_path / "users.db")
    db.initialize()
    return db


@pytest.fixture
def repository(database):
    return UserRepository(database)


@pytest.fixture
def service(repository):
    return UserService(repository, jwt_secret=SECRET, bcrypt_rounds=4)


def _token_row(database, token):
    with database.connection() as conn:
        return conn.execute(
            "SELECT user_id, consumed_at FROM verification_tokens WHERE token = ?", (token,)
        ).fetchone()


def test_register_stores_hash_not_password(service, repository, database):
    user, token = service.register("Ana", "a@x.com", "a@uni.edu", "secret1")

    stored = repository.get_by_id(user.id)
    assert stored.password_hash != "secret1"
    assert stored.password_hash.startswith("$2")
    assert stored.is_verified is False
    assert stored.avatar_color in AVATAR_COLORS
    assert _token_row(database, token)["user_id"] == user.id


def test_unique_constraint_wins_over_precheck(service, repository):
    service.register("Ana", "a@x.com", "a@uni.edu", "secret1")
    with pytest.raises(ConflictError):
        repository.create(
            name="Ana again",
            personal_email="a@x.com",
            uni_email="other@uni.edu",
            password_hash="x",
            avatar_color="#FF6B6B",
            verification_token="another-token",
            verification_expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )


def test_store_rejects_address_used_in_the_other_column(service, repository):
    service.register("Ana", "a@x.com", "a@uni.edu", "secret1")
    with pytest.raises(ConflictError):
        repository.create(
            name="Bob",
            personal_email="a@uni.edu",
            uni_email="b@uni.edu",
            password_hash="x",
            avatar_color="#FF6B6B",
            verification_token="bob-token",
            verification_expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )
    assert repository.get_by_login_email("b@uni.edu") is None


def test_verify_transitions_exactly_one_user(service, repository, database):
    ana, ana_token = service.register("Ana", "a@x.com", "a@uni.edu", "secret1")
    bob, _ = service.register("Bob", "b@x.com", "b@uni.edu", "secret1")

    assert service.verify_email(ana_token) == ana.id

    assert repository.get_by_id(ana.id).is_verified is True
    assert repository.get_by_id(ana.id).verification_date is not None
    assert repository.get_by_id(bob.id).is_verified is False
    assert _token_row(database, ana_token)["consumed_at"] is not None

    with pytest.raises(ValidationError):
        service.verify_email(ana_token)


def test_expired_token_is_rejected(repository):
    service = UserService(
        repository, jwt_secret=SECRET, bcrypt_rounds=4, verification_expiration_hours=0
    )
    _, token = service.register("Ana", "a@x.com", "a@uni.edu", "secret1")
    with pytest.raises(ValidationError):
        service.verify_email(token)


def test_authenticate_states(service):
    _, token = service.register("Ana", "a@x.com", "a@uni.edu", "secret1")

    with pytest.raises(ForbiddenError):
        service.authenticate("a@x.com", "secret1")

    service.verify_email(token)
    assert service.authenticate(" A@x.com ", "secret1").name == "Ana"

    with pytest.raises(AuthError) as wrong_password:
        service.authenticate("a@x.com", "secret2")
    with pytest.raises(AuthError) as unknown:
        service.authenticate("nobody@x.com", "secret1")
    assert wrong_password.value.message == unknown.value.message


def test_session_token_round_trip(service):
    user, token = service.register("Ana", "a@x.com", "a@uni.edu", "secret1")
    service.verify_email(token)
    user = service.authenticate("a@x.com", "secret1")

    session = service.create_token(user)
    payload = service.verify_token(session)
    assert payload["user_id"] == user.id
    assert payload["email"] == "a@x.com"
    assert "iat" in payload and "exp" in payload
    assert service.get_user_for_token(session).id == user.id


def test_token_signed_with_other_secret_is_rejected(service, repository):
    user, token = service.register("Ana", "a@x.com", "a@uni.edu", "secret1")
    service.verify_email(token)
    other = UserService(repository, jwt_secret="another-secret-of-sufficient-length-123", bcrypt_rounds=4)

    forged = other.create_token(repository.get_by_id(user.id))
    assert service.verify_token(forged) is None
    with pytest.raises(AuthError):
        service.get_user_for_token(forged)


def test_expired_session_token_is_rejected(repository):
    service = UserService(repository, jwt_secret=SECRET, bcrypt_rounds=4, jwt_expiration_hours=-1)
    user, token = service.register("Ana", "a@x.com", "a@uni.edu", "secret1")
    service.verify_email(token)
    session = service.create_token(repository.get_by_id(user.id))
    assert service.verify_token(session) is None
