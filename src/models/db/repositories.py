import uuid

from sqlalchemy import Column, String, Text, TIMESTAMP, text, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from src.core.database import Base

class Repository(Base):
    __tablename__ = 'repositories'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id'), nullable=False)
    name = Column(String, nullable=False)
    full_name = Column(String, nullable=False, unique=True, index=True)
    webhook_secret = Column(String)
    rules = Column(Text)
    created_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    owner = relationship("User", back_populates="repositories")
    pull_requests = relationship(
        "PullRequest",
        back_populates="repository",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
