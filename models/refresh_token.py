"""
RefreshToken model: one row per live (user, device) session.
Fields:
- token_hash: argon2 hash of the refresh JWT (the raw token is never stored)
- user_id (String(36)) - FK to users.id
- expires_at: absolute expiry, checked on refresh
- status: active until the row is rotated, revoked or expired
- device_*: client-supplied fingerprint partitioning sessions per device
"""
import enum

from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from models.base_model import BaseModel, Base, as_utc, utcnow


class SessionState(str, enum.Enum):
    ACTIVE = "active"
    ROTATED = "rotated"
    REVOKED = "revoked"
    EXPIRED = "expired"


# Terminal states reachable from each state
TRANSITIONS = {
    SessionState.ACTIVE: {SessionState.ROTATED, SessionState.REVOKED, SessionState.EXPIRED},
    SessionState.ROTATED: set(),
    SessionState.REVOKED: set(),
    SessionState.EXPIRED: set(),
}

DEVICE_FIELDS = (
    "device_id",
    "device_name",
    "device_type",
    "platform",
    "user_agent",
    "browser",
    "browser_version",
    "ip_address",
)


class IllegalTransition(Exception):
    pass


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"
    __table_args__ = (
        Index("ix_refresh_tokens_user_device", "user_id", "device_id"),
    )

    token_hash = Column(String(255), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(16), nullable=False, default=SessionState.ACTIVE.value)

    device_id = Column(String(64), nullable=False, index=True)
    device_name = Column(String(512), nullable=True)
    device_type = Column(String(32), nullable=True)
    platform = Column(String(128), nullable=True)
    user_agent = Column(String(512), nullable=True)
    browser = Column(String(64), nullable=True)
    browser_version = Column(String(64), nullable=True)
    ip_address = Column(String(64), nullable=True)

    user = relationship("User", back_populates="refresh_tokens")

    @property
    def state(self) -> SessionState:
        return SessionState(self.status or SessionState.ACTIVE.value)

    def transition(self, new_state: SessionState):
        if new_state not in TRANSITIONS[self.state]:
            raise IllegalTransition(f"{self.state.value} -> {new_state.value}")
        self.status = new_state.value

    def is_expired(self, now=None) -> bool:
        return as_utc(self.expires_at) <= (now or utcnow())

    def __repr__(self):
        return f"<RefreshToken user={self.user_id} device={self.device_id} {self.status}>"
