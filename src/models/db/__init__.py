# Import all models to ensure SQLAlchemy can resolve relationships
from .users import User
from .github_connections import GithubConnection
from .repositories import Repository
from .pull_requests import PullRequest
from .reviews import Review
from .review_comments import ReviewComment

# Export all models
__all__ = [
    'User',
    'GithubConnection',
    'Repository',
    'PullRequest',
    'Review',
    'ReviewComment',
]
