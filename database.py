from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

import config

Base = declarative_base()


def _build_database_url() -> str:
    if config.DATABASE_URL:
        return config.DATABASE_URL

    # Fall back to the discrete DB_* variables
    if not all([config.DB_USER, config.DB_PASSWORD, config.DB_HOST, config.DB_PORT, config.DB_NAME]):
        raise ValueError("Database configuration is incomplete. Set DATABASE_URL or DB_USER, DB_PASSWORD, DB_HOST, DB_PORT, DB_NAME environment variables.")

    return f"postgresql+psycopg2://{config.DB_USER}:{config.DB_PASSWORD}@{config.DB_HOST}:{config.DB_PORT}/{config.DB_NAME}"


DATABASE_URL = _build_database_url()

if DATABASE_URL.startswith("sqlite"):
    # A single shared connection keeps in-memory databases alive across sessions.
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,
        pool_size=20,
        max_overflow=10
    )

    @event.listens_for(engine, "connect")
    def set_timezone(dbapi_connection, connection_record):
        """Force timezone to be 'UTC' for every connection."""
        cursor = dbapi_connection.cursor()
        cursor.execute("SET TIME ZONE 'UTC'")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Function to initialize the database (create tables)
def init_db():
    # Import all models here to ensure they are registered with Base.metadata
    import models.user
    import models.author
    import models.post
    import models.comment
    import models.notification
    Base.metadata.create_all(bind=engine)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
