from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from src.core.config import settings
from src.exceptions.pr_review_exceptions import (
    GitHubConnectionNotFoundException,
    LLMCredentialNotFoundException,
)
from src.models.db.github_connections import GithubConnection
from src.models.db.users import User
from src.services.llm.llm_factory import LLMProvider
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class LLMCredential:
    provider: LLMProvider
    api_key: str
    source: str  # "user" or "default"

    def __repr__(self) -> str:
        return f"LLMCredential(provider={self.provider.value!r}, source={self.source!r})"


class CredentialService:
    """Resolves the credentials a review run acts with on behalf of a repository owner."""

    def __init__(self, db: Session):
        self.db = db

    def get_github_access_token(self, user_id: UUID) -> str:
        connection: Optional[GithubConnection] = (
            self.db.query(GithubConnection)
            .filter(GithubConnection.user_id == user_id)
            .first()
        )
        if not connection or not connection.access_token:
            raise GitHubConnectionNotFoundException(user_id)
        return connection.access_token

    def resolve_llm_credential(self, user_id: UUID) -> LLMCredential:
        """Prefer the user's own key, fall back to the shared default."""
        provider = LLMProvider(settings.LLM_PROVIDER)

        user: Optional[User] = self.db.get(User, user_id)
        if user and user.llm_api_key:
            return LLMCredential(provider=provider, api_key=user.llm_api_key, source="user")

        default_key = (
            settings.ANTHROPIC_API_KEY if provider == LLMProvider.CLAUDE else settings.OPENAI_API_KEY
        )
        if default_key:
            logger.debug(f"Using shared {provider.value} credential for user {user_id}")
            return LLMCredential(provider=provider, api_key=default_key, source="default")

        raise LLMCredentialNotFoundException(provider.value)
