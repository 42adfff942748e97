from __future__ import annotations

from typing import Any

from client.session import SessionManager, unwrap


class NotesClient:
    """CRUD on the caller's notes; authentication is left to the session."""

    def __init__(self, session: SessionManager) -> None:
        self.session = session

    async def list(self) -> list[dict[str, Any]]:
        return unwrap(await self.session.request("GET", "/notes"))["notes"]

    async def get(self, note_id: str) -> dict[str, Any]:
        return unwrap(await self.session.request("GET", f"/notes/{note_id}"))["note"]

    async def create(self, title: str | None = None, value: str | None = None) -> dict[str, Any]:
        body = {"title": title, "value": value}
        return unwrap(await self.session.request("POST", "/notes", json=body))["note"]

    async def update(self, note_id: str, **fields) -> dict[str, Any]:
        response = await self.session.request("PUT", f"/notes/{note_id}", json=fields)
        return unwrap(response)["note"]

    async def delete(self, note_id: str) -> None:
        unwrap(await self.session.request("DELETE", f"/notes/{note_id}"))
