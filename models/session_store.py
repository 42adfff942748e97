"""
Refresh-token persistence, scoped by (user, device).

Writes are staged on the scoped session; callers commit with storage.save()
so a rotation (retire old row + insert new row) lands in a single transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime

from models import storage
from models.refresh_token import DEVICE_FIELDS, RefreshToken, SessionState

logger = logging.getLogger(__name__)


def find_for_device(user_id: str, device_id: str) -> RefreshToken | None:
    session = storage.get_session()
    return (
        session.query(RefreshToken)
        .filter(
            RefreshToken.user_id == user_id,
            RefreshToken.device_id == device_id,
            RefreshToken.status == SessionState.ACTIVE.value,
        )
        .order_by(RefreshToken.created_at.desc())
        .first()
    )


def _retire_all(query, state: SessionState) -> int:
    count = 0
    for record in query.all():
        retire(record, state)
        count += 1
    return count


def retire(record: RefreshToken, state: SessionState):
    """Move a record to its terminal state and delete it by id."""
    record.transition(state)
    logger.debug("Session %s for user %s device %s -> %s",
                 record.id, record.user_id, record.device_id, state.value)
    record.delete()


def revoke_for_user(user_id: str) -> int:
    session = storage.get_session()
    return _retire_all(
        session.query(RefreshToken).filter(RefreshToken.user_id == user_id),
        SessionState.REVOKED,
    )


def revoke_for_user_device(user_id: str, device_id: str) -> int:
    session = storage.get_session()
    return _retire_all(
        session.query(RefreshToken).filter(
            RefreshToken.user_id == user_id,
            RefreshToken.device_id == device_id,
        ),
        SessionState.REVOKED,
    )


def add(user_id: str, token_hash: str, expires_at: datetime, device: dict) -> RefreshToken:
    record = RefreshToken(
        user_id=user_id,
        token_hash=token_hash,
        expires_at=expires_at,
        status=SessionState.ACTIVE.value,
        **{field: device.get(field) for field in DEVICE_FIELDS},
    )
    storage.new(record)
    return record
