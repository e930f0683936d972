from sqlalchemy import create_engine

from .. import config

engine = create_engine(
    config.DATABASE_URL,
    pool_pre_ping=True,
    pool_size=20,
    connect_args={
        "connect_timeout": config.DB_CONNECT_TIMEOUT,
        "options": f"-c statement_timeout={config.DB_STATEMENT_TIMEOUT_MS}",
    },
)
