from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from . import models

logger = logging.getLogger(__name__)

# name, slug, description, color, icon
DEFAULT_CATEGORIES: tuple[tuple[str, str, str, str, str], ...] = (
    ("Традиција", "tradicija", "Чланци о традицији и обичајима Заплањског краја", "#DC2626", "Crown"),
    ("Култура", "kultura", "Културни садржаји и уметност", "#7C3AED", "Palette"),
    ("Историја", "istorija", "Историјски чланци и приче из прошлости", "#059669", "Scroll"),
    ("Гастрономија", "gastronomija", "Традиционална јела и рецепти", "#EA580C", "ChefHat"),
    ("Природа", "priroda", "О природним лепотама Заплањског краја", "#16A34A", "Trees"),
    ("Људи", "ljudi", "Приче о људима и њиховим животима", "#0EA5E9", "Users"),
    ("Фестивали", "festivali", "Традиционални фестивали и манифестације", "#F59E0B", "Calendar"),
    ("Занати", "zanati", "Стари занати и вештине", "#8B5CF6", "Hammer"),
)


def ensure_seed_data(session_factory: sessionmaker[Session]) -> int:
    """Insert the default categories that are missing (matched by slug). Returns how many were added."""
    db = session_factory()
    try:
        existing = set(db.execute(select(models.Category.slug)).scalars().all())
        added = 0
        for name, slug, description, color, icon in DEFAULT_CATEGORIES:
            if slug in existing:
                continue
            db.add(
                models.Category(name=name, slug=slug, description=description, color=color, icon=icon)
            )
            added += 1
        db.commit()
        logger.info(f"ensure_seed_data: added {added} default categories")
        return added
    finally:
        db.close()


if __name__ == "__main__":
    from dotenv import load_dotenv

    from .db import build_engine, build_session_factory
    from .settings import get_database_url

    load_dotenv()
    logging.basicConfig(level="INFO")
    ensure_seed_data(build_session_factory(build_engine(get_database_url())))
