import uuid

from sqlalchemy import Column, String, Text, TIMESTAMP, text, ForeignKey, Integer, Uuid
from sqlalchemy.orm import relationship
from src.core.database import Base

class ReviewComment(Base):
    __tablename__ = 'review_comments'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    review_id = Column(Uuid, ForeignKey('reviews.id', ondelete='CASCADE'), nullable=False)
    file_path = Column(String, nullable=False)
    line = Column(Integer, nullable=False)
    body = Column(Text, nullable=False)
    category = Column(String, nullable=False)
    severity = Column(String, nullable=False)
    created_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    review = relationship("Review", back_populates="comments")
