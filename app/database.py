from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from app.config import settings


def enable_sqlite_savepoints(engine):
    """
    Let SQLAlchemy emit BEGIN itself on pysqlite so SAVEPOINT (begin_nested)
    stays inside the outer transaction.
    """
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


# SQLite (local dev, tests) does not take pool sizing arguments
if settings.database_url.startswith("sqlite"):
    engine = enable_sqlite_savepoints(create_engine(
        settings.database_url,
        connect_args={"check_same_thread": False},
    ))
else:
    engine = create_engine(
        settings.database_url,
        pool_pre_ping=True,  # Verify connections before using them
        pool_size=10,
        max_overflow=20,
    )

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for FastAPI routes to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
