import uuid

from sqlalchemy import Column, String, Text, TIMESTAMP, text, ForeignKey, Integer, Uuid
from sqlalchemy.orm import relationship
from src.core.database import Base

class Review(Base):
    __tablename__ = 'reviews'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    pr_id = Column(Uuid, ForeignKey('pull_requests.id', ondelete='CASCADE'), nullable=False)
    status = Column(String, nullable=False, default='pending')
    started_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    completed_at = Column(TIMESTAMP)
    summary = Column(Text)
    tokens_used = Column(Integer)

    pull_request = relationship("PullRequest", back_populates="reviews")
    comments = relationship(
        "ReviewComment",
        back_populates="review",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
