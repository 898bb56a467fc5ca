from __future__ import annotations

from datetime import timedelta

import pytest

from models import storage
from models.base_model import utcnow
from models.user import User
from services.errors import DuplicateAccount, InvalidCredentials
from tests.conftest import PASSWORD


def test_register_local_creates_verified_local_user(resolver) -> None:
    user = resolver.register_local(" A@X.com ", PASSWORD, "A Person")
    assert user.email == "a@x.com"
    assert user.provider == "local"
    assert user.is_verified is True
    assert user.password_hash and user.password_hash != PASSWORD
    assert user.google_id is None and user.github_id is None


def test_register_twice_is_a_duplicate(resolver) -> None:
    resolver.register_local("a@x.com", PASSWORD, "A Person")
    with pytest.raises(DuplicateAccount):
        resolver.register_local("A@x.com", PASSWORD, "Someone Else")
    assert storage.count(User) == 1


def test_resolve_local(resolver) -> None:
    user = resolver.register_local("a@x.com", PASSWORD, "A Person")
    assert resolver.resolve_local("a@x.com", PASSWORD).id == user.id


@pytest.mark.parametrize("email, password", [("a@x.com", "Wrong123!"), ("nobody@x.com", PASSWORD)])
def test_resolve_local_rejects_bad_credentials(resolver, email, password) -> None:
    resolver.register_local("a@x.com", PASSWORD, "A Person")
    with pytest.raises(InvalidCredentials):
        resolver.resolve_local(email, password)


def test_provider_only_account_cannot_use_password(resolver) -> None:
    resolver.resolve_external("google", "g-1", "g@x.com", "G", None)
    with pytest.raises(InvalidCredentials):
        resolver.resolve_local("g@x.com", PASSWORD)


def test_resolve_external_creates_provider_account(resolver) -> None:
    user = resolver.resolve_external("github", "gh-7", "Dev@X.com", "Dev", "https://img/dev.png")
    assert user.email == "dev@x.com"
    assert user.provider == "github"
    assert user.github_id == "gh-7"
    assert user.google_id is None
    assert user.password_hash is None
    assert user.avatar == "https://img/dev.png"


def test_external_login_merges_into_local_account(resolver) -> None:
    local = resolver.register_local("a@x.com", PASSWORD, "A Person")
    merged = resolver.resolve_external("google", "g-1", "a@x.com", "Google Name", "https://img/a.png")

    assert merged.id == local.id
    assert merged.provider == "local"
    assert merged.name == "A Person"
    assert merged.google_id == "g-1"
    assert merged.avatar == "https://img/a.png"
    assert storage.count(User) == 1
    # the password still works after linking
    assert resolver.resolve_local("a@x.com", PASSWORD).id == local.id


def test_second_provider_keeps_first_provider_fields(resolver) -> None:
    first = resolver.resolve_external("github", "gh-7", "dev@x.com", "Dev", "https://img/gh.png")
    second = resolver.resolve_external("google", "g-9", "dev@x.com", "Other", None)

    assert second.id == first.id
    assert second.provider == "github"
    assert second.github_id == "gh-7"
    assert second.google_id == "g-9"
    assert second.name == "Dev"
    # no avatar supplied, keep the existing one
    assert second.avatar == "https://img/gh.png"


def test_repeat_external_login_refreshes_updated_at(resolver) -> None:
    user = resolver.resolve_external("google", "g-1", "g@x.com", "G", None)
    stale = utcnow() - timedelta(days=1)
    user.updated_at = stale
    storage.new(user)
    storage.save()

    again = resolver.resolve_external("google", "g-1", "g@x.com", "G", None)
    assert again.updated_at > stale


def test_unsupported_provider(resolver) -> None:
    with pytest.raises(ValueError):
        resolver.resolve_external("myspace", "m-1", "m@x.com", "M", None)


def test_update_profile(resolver) -> None:
    user = resolver.register_local("a@x.com", PASSWORD, "A Person")
    updated = resolver.update_profile(user, name="New Name", avatar="https://img/new.png")
    assert updated.name == "New Name"
    assert resolver.get_user(user.id).avatar == "https://img/new.png"
