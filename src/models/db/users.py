import uuid

from sqlalchemy import Column, String, TIMESTAMP, Uuid, text
from sqlalchemy.orm import relationship
from src.core.database import Base

class User(Base):
    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String, nullable=False, unique=True)
    name = Column(String)
    # Decrypted by the credential store before it reaches this column's readers
    llm_api_key = Column(String)
    created_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    github_connection = relationship("GithubConnection", back_populates="user", uselist=False)
    repositories = relationship("Repository", back_populates="owner")
