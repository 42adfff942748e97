"""Async Python client for the Notes API."""
from client.notes import NotesClient
from client.session import ApiRequestError, SessionExpired, SessionManager

__all__ = ["ApiRequestError", "NotesClient", "SessionExpired", "SessionManager"]
