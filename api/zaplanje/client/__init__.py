"""Async reader client for the Zaplanje content API."""

from .api import ClientSettings, ContentClient, ContentStoreError
from .collections import (
    AuthorsCollection,
    CategoriesCollection,
    CommentsCollection,
    NewsletterSubscriptions,
    PostsCollection,
)
from .search import SearchSession
from .views import ViewRecorder

__all__ = [
    "AuthorsCollection",
    "CategoriesCollection",
    "ClientSettings",
    "CommentsCollection",
    "ContentClient",
    "ContentStoreError",
    "NewsletterSubscriptions",
    "PostsCollection",
    "SearchSession",
    "ViewRecorder",
]
