from __future__ import annotations

from app.models.user import ProviderIdentity
from app.services.users import UserRepository


def test_first_login_creates_user_and_second_reuses_it(record_store) -> None:
    users = UserRepository(record_store)
    identity = ProviderIdentity(subject="li-1", name="Ada Lovelace")

    created = users.find_or_create(identity)
    again = users.find_or_create(
        ProviderIdentity(
            subject="li-1",
            name="Ada King",
            profile_url="https://www.linkedin.com/in/ada",
        )
    )

    assert again.id == created.id
    assert again.name == "Ada King"
    assert again.profile_url == "https://www.linkedin.com/in/ada"
    assert again.created_at == created.created_at
    assert users.get(created.id).name == "Ada King"


def test_distinct_members_get_distinct_users(record_store) -> None:
    users = UserRepository(record_store)

    first = users.find_or_create(ProviderIdentity(subject="li-1", name="A"))
    second = users.find_or_create(ProviderIdentity(subject="li-2", name="B"))

    assert first.id != second.id
    assert users.get("missing") is None
