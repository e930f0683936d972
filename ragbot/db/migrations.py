"""
Schema setup: plain .sql scripts applied in filename order on startup.
Scripts must be idempotent; they run on every boot.
"""
import os
from typing import List

from sqlalchemy import text

from .. import config
from ..logging_config import logger
from ..store import store_errors

MIGRATIONS_DIR = os.path.join(os.path.dirname(__file__), "scripts")


def render_migration(sql: str, embed_dim: int = config.EMBED_DIM) -> str:
    """Fill the {{EMBED_DIM}} placeholder used by the vector column."""
    return sql.replace("{{EMBED_DIM}}", str(int(embed_dim)))


def list_migrations(migrations_dir: str = MIGRATIONS_DIR) -> List[str]:
    if not os.path.isdir(migrations_dir):
        return []
    return sorted(name for name in os.listdir(migrations_dir) if name.endswith(".sql"))


def run_sql_migrations(engine=None, migrations_dir: str = MIGRATIONS_DIR) -> int:
    """
    Apply every script in `migrations_dir` inside one transaction.

    Returns:
        Number of scripts executed

    Raises:
        StoreError: A script failed; nothing from this run is committed
    """
    names = list_migrations(migrations_dir)
    if not names:
        logger.warning("No migration scripts found", path=migrations_dir)
        return 0

    if engine is None:
        from . import engine

    with store_errors("run migrations"), engine.begin() as conn:
        for name in names:
            with open(os.path.join(migrations_dir, name), encoding="utf-8") as f:
                conn.execute(text(render_migration(f.read())))
            logger.info("Applied migration", file=name, embed_dim=config.EMBED_DIM)

    return len(names)
