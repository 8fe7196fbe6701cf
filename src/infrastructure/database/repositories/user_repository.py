from __future__ import annotations

import os
import threading
import uuid
from datetime import UTC, datetime

from supabase import Client

from src.domain.entities.user import UserEntity
from src.infrastructure.database.postgres_client import get_postgres_client

# module-level in-memory store for disabled mode
_MEM_USERS: dict[str, UserEntity] = {}
_MEM_LOCK = threading.Lock()


class UserRepository:
    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None

    def _row_to_entity(self, row: dict) -> UserEntity:
        """Convert database row to UserEntity."""
        created_at = row.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return UserEntity(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password=row["password"],
            avatar=row.get("avatar"),
            created_at=created_at,
        )

    def create(self, name: str, email: str, password: str, avatar: str | None) -> UserEntity | None:
        """Insert a user. Returns None when the email is already registered."""
        user_id = str(uuid.uuid4())
        now = datetime.now(UTC)

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            query = """
                INSERT INTO users (id, name, email, password, avatar, created_at)
                VALUES (%s, %s, %s, %s, %s, %s)
                ON CONFLICT (email) DO NOTHING
                RETURNING *
            """
            try:
                row = self.pg_client.execute_one(query, (user_id, name, email, password, avatar, now))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL insert user failed: {exc}") from exc
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.disabled or self.client is None:
            with _MEM_LOCK:
                if any(u.email == email for u in _MEM_USERS.values()):
                    return None
                entity = UserEntity(
                    id=user_id, name=name, email=email, password=password, avatar=avatar, created_at=now
                )
                _MEM_USERS[user_id] = entity
                return entity

        # Supabase mode
        if self.get_by_email(email) is not None:  # pragma: no cover - network
            return None
        try:  # pragma: no cover - network
            data = {
                "id": user_id,
                "name": name,
                "email": email,
                "password": password,
                "avatar": avatar,
                "created_at": now.isoformat(),
            }
            res = self.client.table("users").insert(data).execute()
            return self._row_to_entity(res.data[0])
        except Exception as exc:
            raise RuntimeError(f"DB insert user failed: {exc}") from exc

    def get(self, user_id: str) -> UserEntity | None:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            row = self.pg_client.execute_one("SELECT * FROM users WHERE id = %s", (user_id,))
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.disabled or self.client is None:
            return _MEM_USERS.get(user_id)

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("users").select("*").eq("id", user_id).limit(1).execute()
            rows = res.data or []
            return self._row_to_entity(rows[0]) if rows else None
        except Exception as exc:
            raise RuntimeError(f"DB get user failed: {exc}") from exc

    def get_by_email(self, email: str) -> UserEntity | None:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            row = self.pg_client.execute_one("SELECT * FROM users WHERE email = %s", (email,))
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.disabled or self.client is None:
            return next((u for u in _MEM_USERS.values() if u.email == email), None)

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("users").select("*").eq("email", email).limit(1).execute()
            rows = res.data or []
            return self._row_to_entity(rows[0]) if rows else None
        except Exception as exc:
            raise RuntimeError(f"DB get user by email failed: {exc}") from exc

    def delete(self, user_id: str) -> bool:
        """Delete by id. Deleting a missing user is not an error."""
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            try:
                affected = self.pg_client.execute_update("DELETE FROM users WHERE id = %s", (user_id,))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL delete user failed: {exc}") from exc
            return affected > 0

        # In-memory mode
        if self.disabled or self.client is None:
            with _MEM_LOCK:
                return _MEM_USERS.pop(user_id, None) is not None

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("users").delete().eq("id", user_id).execute()
            return bool(res.data)
        except Exception as exc:
            raise RuntimeError(f"DB delete user failed: {exc}") from exc
