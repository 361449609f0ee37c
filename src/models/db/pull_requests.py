import uuid

from sqlalchemy import Column, String, TIMESTAMP, text, ForeignKey, Integer, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from src.core.database import Base

class PullRequest(Base):
    __tablename__ = 'pull_requests'
    __table_args__ = (
        UniqueConstraint('repository_id', 'number', name='uq_pull_requests_repository_number'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    repository_id = Column(Uuid, ForeignKey('repositories.id', ondelete='CASCADE'), nullable=False)
    number = Column(Integer, nullable=False)
    title = Column(String, nullable=False)
    author = Column(String, nullable=False)
    url = Column(String, nullable=False)
    status = Column(String, nullable=False, default='open')
    created_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    repository = relationship("Repository", back_populates="pull_requests")
    reviews = relationship(
        "Review",
        back_populates="pull_request",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
