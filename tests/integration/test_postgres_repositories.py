"""
Repository behaviour against a real PostgreSQL database.

Runs only when ``POSTGRES_TESTS=1``; connection settings come from the usual
``POSTGRES_*`` variables. Tables are emptied before each test.
"""
from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from src.application.use_cases.manage_profile import ProfileManager
from src.domain.entities.profile import EducationEntity, ExperienceEntity, ProfilePatch
from src.domain.errors import NotFound
from src.infrastructure.database import postgres_client
from src.infrastructure.database.repositories.profile_repository import ProfileRepository
from src.infrastructure.database.repositories.user_repository import UserRepository

pytestmark = pytest.mark.skipif(
    os.getenv("POSTGRES_TESTS", "0") != "1", reason="set POSTGRES_TESTS=1 to run against PostgreSQL"
)


@pytest.fixture()
def pg(monkeypatch):
    monkeypatch.setenv("USE_LOCAL_DB", "1")
    monkeypatch.setattr(postgres_client, "_POSTGRES_CLIENT", None)
    client = postgres_client.get_postgres_client()
    client.ensure_schema()
    client.execute_update("TRUNCATE profiles, users")
    yield client
    client.close()


@pytest.fixture()
def users(pg) -> UserRepository:
    return UserRepository(None)


@pytest.fixture()
def manager(pg, users) -> ProfileManager:
    return ProfileManager(profiles=ProfileRepository(None), users=users)


@pytest.fixture()
def user_id(users) -> str:
    return users.create(name="Ada", email="ada@mail.com", password="hash", avatar="https://img/ada").id


def _patch(**fields) -> ProfilePatch:
    return ProfilePatch.from_input(**{"status": "Developer", "skills": "python, sql", **fields})


def _count_profiles(pg) -> int:
    return pg.execute_one("SELECT count(*) AS n FROM profiles")["n"]


def test_duplicate_email_returns_none(users, user_id):
    assert users.create(name="Other", email="ada@mail.com", password="hash", avatar=None) is None


def test_upsert_merges_social_and_keeps_omitted_fields(manager, user_id):
    first = manager.upsert_profile(user_id, _patch(company="Acme", twitter="https://twitter.com/ada"))
    second = manager.upsert_profile(user_id, _patch(status="Lead", youtube="https://youtube.com/ada"))

    assert second.id == first.id
    assert second.status == "Lead"
    assert second.company == "Acme"
    assert second.social == {"twitter": "https://twitter.com/ada", "youtube": "https://youtube.com/ada"}
    assert second.user.name == "Ada"


def test_concurrent_first_writes_create_one_row(pg, manager, user_id):
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda i: manager.upsert_profile(user_id, _patch(bio=f"b{i}")), range(16)))
    assert len({p.id for p in results}) == 1
    assert _count_profiles(pg) == 1


def test_concurrent_pushes_are_all_kept(manager, user_id):
    manager.upsert_profile(user_id, _patch())

    def add(i: int):
        entry = ExperienceEntity(title=f"job-{i}", company="Acme", from_date=date(2020, 1, 1))
        return manager.add_experience(user_id, entry)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(add, range(20)))

    titles = {e.title for e in manager.get_own_profile(user_id).experience}
    assert titles == {f"job-{i}" for i in range(20)}


def test_pull_keeps_order_and_ignores_unknown_ids(manager, user_id):
    manager.upsert_profile(user_id, _patch())
    for school in ("A", "B", "C"):
        manager.add_education(
            user_id, EducationEntity(school=school, degree="BSc", fieldofstudy="CS", from_date=date(2014, 9, 1))
        )
    newest_first = manager.get_own_profile(user_id).education
    assert [e.school for e in newest_first] == ["C", "B", "A"]

    with pytest.raises(NotFound, match="Education not found"):
        manager.remove_education(user_id, "does-not-exist")
    assert len(manager.get_own_profile(user_id).education) == 3

    profile = manager.remove_education(user_id, newest_first[1].id)
    assert [e.school for e in profile.education] == ["C", "A"]


def test_delete_account_removes_profile_and_user(pg, manager, users, user_id):
    manager.upsert_profile(user_id, _patch())
    manager.delete_account(user_id)
    assert users.get(user_id) is None
    assert _count_profiles(pg) == 0
