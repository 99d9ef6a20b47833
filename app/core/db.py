# =============================================================================================
# APP/CORE/DB.PY - SQLALCHEMY DATABASE ENGINE AND SESSION MANAGEMENT
# =============================================================================================
# This module sets up the database connection layer using SQLAlchemy ORM.
#
# KEY CONCEPTS:
# - Engine: Manages the connection pool (created once at import)
# - SessionLocal: Factory for creating database sessions (one per request)
# - Base: Parent class for all ORM models (User, RefreshToken, Currency, ExchangeRate)
# - get_db(): FastAPI dependency that provides a session per request
#
# FLOW:
# 1. Engine connects to DATABASE_URL from config
# 2. Each API request calls get_db() to get a fresh session
# 3. Services query/insert/update through that session and commit
# 4. Session closes after the request (even if an error occurs)
# 5. On startup, init_db() creates tables if missing
# =============================================================================================

from collections.abc import Iterator
from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from app.core.config import get_settings

settings = get_settings()


def _connect_args(url: str) -> dict:
    # FastAPI runs sync endpoints in a threadpool; SQLite must allow cross-thread use
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# -------------------------
# STEP 1: Create the database engine
# -------------------------
engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    pool_pre_ping=True,  # Test connections before use
)


# -------------------------
# SQLITE: enforce foreign keys
# -------------------------
# Foreign keys are OFF by default in SQLite. We need them ON so that
# ON DELETE CASCADE removes a currency's exchange-rate rows and a user's tokens.
# Registered on the Engine class so test engines get the same behavior.
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key enforcement on every new SQLite connection."""
    if type(dbapi_conn).__module__.startswith("sqlite3"):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()


# -------------------------
# STEP 2: Create session factory
# -------------------------
# autocommit=False: services decide when a unit of work is committed
# autoflush=False: explicit flushes prevent unexpected queries
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# -------------------------
# STEP 3: Create declarative base for models
# -------------------------
Base = declarative_base()


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    SQLite hands DateTime columns back without tzinfo, so every timestamp we store
    and compare against is naive UTC. Mixing aware and naive values raises TypeError.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


# -------------------------
# STEP 4: Dependency for FastAPI routes
# -------------------------
def get_db() -> Iterator[Session]:
    """
    FastAPI dependency that provides a database session for each request.

    LIFECYCLE:
    1. Request arrives at an endpoint that depends on get_db
    2. A new session is created and injected
    3. The service layer commits its unit of work
    4. `finally` closes the session and returns the connection to the pool

    USAGE IN ROUTES:
        @router.get("/currencies")
        def list_currencies(db: Session = Depends(get_db)):
            return CurrencyService(db).get_all_currencies()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# -------------------------
# STEP 5: Database initialization helper
# -------------------------
def init_db(bind=None) -> None:
    """
    Create every table registered on Base.metadata (CREATE TABLE IF NOT EXISTS).

    Called on application startup and by `python manage.py init-db`.
    Tests pass their own in-memory engine through `bind`.
    """
    # Import models so they register with Base.metadata before create_all()
    from app.models import user, token, currency  # noqa: F401 (imported for side effects)

    Base.metadata.create_all(bind=bind or engine)
