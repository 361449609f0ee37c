import uuid

from sqlalchemy import Column, String, TIMESTAMP, text, ForeignKey, BigInteger, Uuid
from sqlalchemy.orm import relationship
from src.core.database import Base

class GithubConnection(Base):
    __tablename__ = 'github_connections'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    github_user_id = Column(BigInteger, nullable=False)
    username = Column(String, nullable=False)
    access_token = Column(String, nullable=False)
    created_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    user = relationship("User", back_populates="github_connection")
