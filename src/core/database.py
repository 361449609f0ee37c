from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from src.core.config import settings

engine = create_engine(settings.DATABASE_URL, echo=settings.env == "development", future=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

import src.models.db

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
