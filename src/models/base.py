from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from src.config import config

Base = declarative_base()

if config.DATABASE_URL.startswith("sqlite"):
    engine = create_engine(config.DATABASE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(
        config.DATABASE_URL,
        pool_size=20,
        max_overflow=5,
        pool_timeout=config.LEDGER_TIMEOUT_SECONDS,
        pool_recycle=1800,
        connect_args={"connect_timeout": max(1, int(config.LEDGER_TIMEOUT_SECONDS))},
    )
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
