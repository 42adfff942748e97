from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from models.base_model import BaseModel, Base

DEFAULT_TITLE = "Untitled"


class Note(BaseModel, Base):
    __tablename__ = "notes"

    title = Column(String(255), nullable=False, default=DEFAULT_TITLE)
    value = Column(Text, nullable=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="notes")
