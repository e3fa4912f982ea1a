from __future__ import annotations

from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .auth import get_principal
from .db import get_session
from .policies import Principal
from .settings import Settings
from .store import SqlContentStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator[Session, None, None]:
    yield from get_session(request.app.state.session_factory)


def get_store(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(get_principal),
) -> SqlContentStore:
    """Content store acting for the caller of the current request."""
    return SqlContentStore(db, principal, search_text_config=settings.search_text_config)
