"""User lookups and inserts. The only module that queries the users table."""
from __future__ import annotations

from sqlalchemy import or_

from models import storage
from models.user import User


def get_user(user_id: str) -> User | None:
    return storage.get(User, user_id)


def find_by_email_or_username(identifier: str) -> User | None:
    session = storage.get_session()
    return (
        session.query(User)
        .filter(or_(User.email == identifier.lower(), User.username == identifier))
        .first()
    )


def email_taken(email: str) -> bool:
    session = storage.get_session()
    return session.query(User.id).filter(User.email == email).first() is not None


def username_taken(username: str) -> bool:
    session = storage.get_session()
    return session.query(User.id).filter(User.username == username).first() is not None


def create_user(email: str, username: str, password_hash: str) -> User:
    user = User(email=email, username=username, password_hash=password_hash)
    storage.new(user)
    storage.save()
    return user
