from __future__ import annotations

import json
import os
import threading
import uuid
from dataclasses import replace
from datetime import UTC, date, datetime
from typing import Any

from psycopg2 import sql
from psycopg2.extras import Json
from supabase import Client

from src.domain.entities.profile import EducationEntity, ExperienceEntity, ProfileEntity, ProfilePatch
from src.domain.entities.user import UserSummary
from src.infrastructure.database.locks import entity_lock
from src.infrastructure.database.postgres_client import get_postgres_client
from src.infrastructure.database.repositories.user_repository import UserRepository

# module-level in-memory store for disabled mode, keyed by owning user id
_MEM_PROFILES: dict[str, ProfileEntity] = {}
_MEM_LOCK = threading.Lock()

_JSON_COLUMNS = {"skills", "social", "experience", "education"}

# Joins the owner's name and avatar onto rows produced by a CTE named ``p``
_JOIN_OWNER = """
    SELECT p.*, u.name AS user_name, u.avatar AS user_avatar
    FROM p LEFT JOIN users u ON u.id = p.user_id
"""

_SELECT_PROFILES = """
    WITH p AS (SELECT * FROM profiles)
""" + _JOIN_OWNER


def _parse_date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _experience_to_doc(entry: ExperienceEntity) -> dict[str, Any]:
    return {
        "id": entry.id,
        "title": entry.title,
        "company": entry.company,
        "location": entry.location,
        "from": entry.from_date.isoformat(),
        "to": entry.to_date.isoformat() if entry.to_date else None,
        "current": entry.current,
        "description": entry.description,
    }


def _experience_from_doc(doc: dict[str, Any]) -> ExperienceEntity:
    return ExperienceEntity(
        id=doc["id"],
        title=doc["title"],
        company=doc["company"],
        location=doc.get("location"),
        from_date=_parse_date(doc["from"]),
        to_date=_parse_date(doc.get("to")),
        current=bool(doc.get("current", False)),
        description=doc.get("description"),
    )


def _education_to_doc(entry: EducationEntity) -> dict[str, Any]:
    return {
        "id": entry.id,
        "school": entry.school,
        "degree": entry.degree,
        "fieldofstudy": entry.fieldofstudy,
        "from": entry.from_date.isoformat(),
        "to": entry.to_date.isoformat() if entry.to_date else None,
        "current": entry.current,
        "description": entry.description,
    }


def _education_from_doc(doc: dict[str, Any]) -> EducationEntity:
    return EducationEntity(
        id=doc["id"],
        school=doc["school"],
        degree=doc["degree"],
        fieldofstudy=doc["fieldofstudy"],
        from_date=_parse_date(doc["from"]),
        to_date=_parse_date(doc.get("to")),
        current=bool(doc.get("current", False)),
        description=doc.get("description"),
    )


_TO_DOC = {"experience": _experience_to_doc, "education": _education_to_doc}


class ProfileRepository:
    """Profiles with their experience and education sub-lists, one per user."""

    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None
        self.users = UserRepository(client)

    @property
    def _in_memory(self) -> bool:
        return not (self.use_local_db and self.pg_client) and (self.disabled or self.client is None)

    def _row_to_entity(self, row: dict) -> ProfileEntity:
        """Convert database row (with joined owner fields) to ProfileEntity."""
        created_at = row.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)

        # JSONB columns arrive decoded from psycopg2 and supabase, but not from every driver
        docs = {}
        for column in _JSON_COLUMNS:
            value = row.get(column)
            if isinstance(value, str):
                value = json.loads(value)
            docs[column] = value

        owner = row.get("users")  # supabase embedded resource
        if isinstance(owner, dict):
            user = UserSummary(id=row["user_id"], name=owner.get("name"), avatar=owner.get("avatar"))
        else:
            user = UserSummary(id=row["user_id"], name=row.get("user_name"), avatar=row.get("user_avatar"))

        return ProfileEntity(
            id=row["id"],
            user_id=row["user_id"],
            company=row.get("company"),
            website=row.get("website"),
            location=row.get("location"),
            bio=row.get("bio"),
            status=row.get("status"),
            githubusername=row.get("githubusername"),
            skills=tuple(docs["skills"] or ()),
            social=dict(docs["social"] or {}),
            experience=tuple(_experience_from_doc(d) for d in docs["experience"] or ()),
            education=tuple(_education_from_doc(d) for d in docs["education"] or ()),
            created_at=created_at,
            user=user,
        )

    def _with_owner(self, profile: ProfileEntity | None) -> ProfileEntity | None:
        if profile is None:
            return None
        owner = self.users.get(profile.user_id)
        summary = UserSummary(
            id=profile.user_id,
            name=owner.name if owner else None,
            avatar=owner.avatar if owner else None,
        )
        return replace(profile, user=summary)

    def get_by_user(self, user_id: str) -> ProfileEntity | None:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            query = """
                WITH p AS (SELECT * FROM profiles WHERE user_id = %s)
            """ + _JOIN_OWNER
            row = self.pg_client.execute_one(query, (user_id,))
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self._in_memory:
            return self._with_owner(_MEM_PROFILES.get(user_id))

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("profiles")
                .select("*, users(name, avatar)")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
            rows = res.data or []
            return self._row_to_entity(rows[0]) if rows else None
        except Exception as exc:
            raise RuntimeError(f"DB get profile failed: {exc}") from exc

    def list_all(self) -> list[ProfileEntity]:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            rows = self.pg_client.execute_many(_SELECT_PROFILES + " ORDER BY p.created_at")
            return [self._row_to_entity(row) for row in rows]

        # In-memory mode
        if self._in_memory:
            return [self._with_owner(p) for p in list(_MEM_PROFILES.values())]

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("profiles")
                .select("*, users(name, avatar)")
                .order("created_at", desc=False)
                .execute()
            )
            return [self._row_to_entity(row) for row in res.data or []]
        except Exception as exc:
            raise RuntimeError(f"DB list profiles failed: {exc}") from exc

    def upsert(self, user_id: str, patch: ProfilePatch) -> ProfileEntity:
        """Create the user's profile from ``patch`` or merge ``patch`` into the existing one."""
        columns = patch.as_columns()

        # PostgreSQL mode: one INSERT ... ON CONFLICT statement
        if self.use_local_db and self.pg_client:
            names = ["id", "user_id", *columns]
            values = [str(uuid.uuid4()), user_id]
            values += [Json(v) if k in _JSON_COLUMNS else v for k, v in columns.items()]
            assignments = [
                sql.SQL("{0} = EXCLUDED.{0}").format(sql.Identifier(name))
                for name in columns
                if name != "social"
            ]
            if "social" in columns:
                assignments.append(sql.SQL("social = profiles.social || EXCLUDED.social"))
            if not assignments:
                # keep RETURNING populated for an empty patch
                assignments.append(sql.SQL("user_id = EXCLUDED.user_id"))
            query = sql.SQL(
                """
                WITH p AS (
                    INSERT INTO profiles ({names}) VALUES ({values})
                    ON CONFLICT (user_id) DO UPDATE SET {assignments}
                    RETURNING *
                )
                """
                + _JOIN_OWNER
            ).format(
                names=sql.SQL(", ").join(map(sql.Identifier, names)),
                values=sql.SQL(", ").join(sql.Placeholder() * len(names)),
                assignments=sql.SQL(", ").join(assignments),
            )
            try:
                row = self.pg_client.execute_insert(query, tuple(values))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL upsert profile failed: {exc}") from exc
            return self._row_to_entity(row)

        with entity_lock(f"profile:{user_id}"):
            current = self.get_by_user(user_id)

            # In-memory mode
            if self._in_memory:
                base = current or ProfileEntity(
                    id=str(uuid.uuid4()), user_id=user_id, created_at=datetime.now(UTC)
                )
                with _MEM_LOCK:
                    _MEM_PROFILES[user_id] = replace(patch.apply(base), user=None)
                return self._with_owner(_MEM_PROFILES[user_id])

            # Supabase mode
            try:  # pragma: no cover - network
                if current is None:
                    data = {"id": str(uuid.uuid4()), "user_id": user_id, **columns}
                    self.client.table("profiles").insert(data).execute()
                elif columns:
                    if "social" in columns:
                        columns["social"] = {**current.social, **columns["social"]}
                    self.client.table("profiles").update(columns).eq("user_id", user_id).execute()
            except Exception as exc:
                raise RuntimeError(f"DB upsert profile failed: {exc}") from exc
            return self.get_by_user(user_id)

    def push_experience(self, user_id: str, entry: ExperienceEntity) -> ProfileEntity | None:
        return self._push_entry("experience", user_id, entry)

    def pull_experience(self, user_id: str, entry_id: str) -> ProfileEntity | None:
        return self._pull_entry("experience", user_id, entry_id)

    def push_education(self, user_id: str, entry: EducationEntity) -> ProfileEntity | None:
        return self._push_entry("education", user_id, entry)

    def pull_education(self, user_id: str, entry_id: str) -> ProfileEntity | None:
        return self._pull_entry("education", user_id, entry_id)

    def _push_entry(self, column: str, user_id: str, entry: Any) -> ProfileEntity | None:
        """Prepend ``entry`` to a sub-list. Returns None when the user has no profile."""
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            query = sql.SQL(
                """
                WITH p AS (
                    UPDATE profiles SET {col} = %s::jsonb || {col}
                    WHERE user_id = %s
                    RETURNING *
                )
                """
                + _JOIN_OWNER
            ).format(col=sql.Identifier(column))
            try:
                row = self.pg_client.execute_one(query, (Json([_TO_DOC[column](entry)]), user_id))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL add {column} failed: {exc}") from exc
            return self._row_to_entity(row) if row else None

        with entity_lock(f"profile:{user_id}"):
            current = self.get_by_user(user_id)
            if current is None:
                return None
            entries = (entry, *getattr(current, column))

            # In-memory mode
            if self._in_memory:
                with _MEM_LOCK:
                    _MEM_PROFILES[user_id] = replace(current, user=None, **{column: entries})
                return self._with_owner(_MEM_PROFILES[user_id])

            # Supabase mode
            return self._save_entries(column, user_id, entries)  # pragma: no cover - network

    def _pull_entry(self, column: str, user_id: str, entry_id: str) -> ProfileEntity | None:
        """Remove the entry with ``entry_id``. Returns None if the profile or the entry is missing."""
        # PostgreSQL mode: only touches the row when the entry is present
        if self.use_local_db and self.pg_client:
            query = sql.SQL(
                """
                WITH p AS (
                    UPDATE profiles SET {col} = (
                        SELECT COALESCE(jsonb_agg(e ORDER BY ord), '[]'::jsonb)
                        FROM jsonb_array_elements({col}) WITH ORDINALITY AS t(e, ord)
                        WHERE e->>'id' <> %s
                    )
                    WHERE user_id = %s AND {col} @> %s::jsonb
                    RETURNING *
                )
                """
                + _JOIN_OWNER
            ).format(col=sql.Identifier(column))
            params = (entry_id, user_id, Json([{"id": entry_id}]))
            try:
                row = self.pg_client.execute_one(query, params)
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL remove {column} failed: {exc}") from exc
            return self._row_to_entity(row) if row else None

        with entity_lock(f"profile:{user_id}"):
            current = self.get_by_user(user_id)
            if current is None:
                return None
            existing = getattr(current, column)
            kept = tuple(e for e in existing if e.id != entry_id)
            if len(kept) == len(existing):
                return None

            # In-memory mode
            if self._in_memory:
                with _MEM_LOCK:
                    _MEM_PROFILES[user_id] = replace(current, user=None, **{column: kept})
                return self._with_owner(_MEM_PROFILES[user_id])

            # Supabase mode
            return self._save_entries(column, user_id, kept)  # pragma: no cover - network

    def _save_entries(self, column: str, user_id: str, entries: tuple) -> ProfileEntity | None:  # pragma: no cover - network
        try:
            docs = [_TO_DOC[column](e) for e in entries]
            self.client.table("profiles").update({column: docs}).eq("user_id", user_id).execute()
        except Exception as exc:
            raise RuntimeError(f"DB update {column} failed: {exc}") from exc
        return self.get_by_user(user_id)

    def delete_by_user(self, user_id: str) -> bool:
        """Delete the user's profile. Deleting a missing profile is not an error."""
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            try:
                affected = self.pg_client.execute_update("DELETE FROM profiles WHERE user_id = %s", (user_id,))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL delete profile failed: {exc}") from exc
            return affected > 0

        # In-memory mode
        if self._in_memory:
            with _MEM_LOCK:
                return _MEM_PROFILES.pop(user_id, None) is not None

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("profiles").delete().eq("user_id", user_id).execute()
            return bool(res.data)
        except Exception as exc:
            raise RuntimeError(f"DB delete profile failed: {exc}") from exc
