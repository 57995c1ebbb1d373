"""Expose constructed client wrappers."""

from .dynamodb import DynamoDBClient
from .linkedin_auth import LinkedInOAuthClient
from .sqlite_store import SQLiteStore

__all__ = [
    "DynamoDBClient",
    "LinkedInOAuthClient",
    "SQLiteStore",
]
