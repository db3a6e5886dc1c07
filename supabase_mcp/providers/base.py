"""Base provider interface for the Supabase backend.

The tools layer only talks to this interface, so every tool can be tested
against an in-memory fake and the concrete client library stays swappable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from supabase_mcp.queries import DeleteQuery, InsertQuery, SelectQuery, UpdateQuery


class BackendProvider(ABC):
    """Abstract base class for the data/storage/functions/auth backend."""

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    @abstractmethod
    async def select(self, query: SelectQuery) -> list[dict]:
        """Run a filtered, optionally joined read."""

    @abstractmethod
    async def insert(self, query: InsertQuery) -> list[dict]:
        """Insert a row and return the stored representation."""

    @abstractmethod
    async def update(self, query: UpdateQuery) -> list[dict]:
        """Update matching rows and return them."""

    @abstractmethod
    async def delete(self, query: DeleteQuery) -> list[dict]:
        """Delete matching rows and return them."""

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        cache_control: str | None = None,
        content_type: str | None = None,
        upsert: bool | None = None,
    ) -> dict:
        """Upload bytes to ``bucket/path``."""

    @abstractmethod
    async def download(self, bucket: str, path: str) -> bytes:
        """Download the bytes stored at ``bucket/path``."""

    # ------------------------------------------------------------------
    # Edge functions
    # ------------------------------------------------------------------

    @abstractmethod
    async def invoke(
        self,
        function: str,
        body: dict | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Invoke an edge function; returns parsed JSON or raw bytes."""

    # ------------------------------------------------------------------
    # Auth admin
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_users(self, page: int = 1, per_page: int = 50) -> dict:
        """List users, one page at a time."""

    @abstractmethod
    async def get_user(self, user_id: str) -> dict:
        """Get a user by id."""

    @abstractmethod
    async def create_user(
        self, email: str, password: str, metadata: dict | None = None
    ) -> dict:
        """Create an email-confirmed user."""

    @abstractmethod
    async def update_user(
        self,
        user_id: str,
        email: str | None = None,
        password: str | None = None,
        metadata: dict | None = None,
    ) -> dict:
        """Update the given attributes of a user."""

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        """Delete a user."""

    @abstractmethod
    async def assign_role(self, user_id: str, role: str) -> dict:
        """Add ``role`` to a user's roles."""

    @abstractmethod
    async def remove_role(self, user_id: str, role: str) -> dict:
        """Remove ``role`` from a user's roles."""

    async def close(self) -> None:
        """Clean up resources. Override if the provider holds connections."""
