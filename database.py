from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

# Configure logging
logger = logging.getLogger(__name__)

Base = declarative_base()

# Bounded pool for server databases
POOL_SIZE = 10


def mask_url(database_url):
    """Render a database URL with the password hidden, for logging."""
    return make_url(database_url).render_as_string(hide_password=True)


def build_engine(database_url):
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_size=POOL_SIZE, max_overflow=0, pool_pre_ping=True)


def build_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def ensure_database(database_url):
    """
    Create the target database if the server does not have it yet.

    MySQL uses CREATE DATABASE IF NOT EXISTS, PostgreSQL checks pg_database first.
    SQLite creates its file on first connect so nothing is done for it.
    """
    url = make_url(database_url)
    backend = url.get_backend_name()
    if backend not in ("mysql", "postgresql") or not url.database:
        return

    if backend == "mysql":
        server_engine = create_engine(url.set(database=None), isolation_level="AUTOCOMMIT")
    else:
        server_engine = create_engine(url.set(database="postgres"), isolation_level="AUTOCOMMIT")

    try:
        quoted_name = server_engine.dialect.identifier_preparer.quote(url.database)
        with server_engine.connect() as connection:
            if backend == "mysql":
                connection.execute(text(f"CREATE DATABASE IF NOT EXISTS {quoted_name}"))
            else:
                exists = connection.execute(
                    text("SELECT 1 FROM pg_database WHERE datname = :name"),
                    {"name": url.database}
                ).first()
                if exists is None:
                    connection.execute(text(f"CREATE DATABASE {quoted_name}"))
        logger.info(f"Database '{url.database}' checked/created successfully")
    finally:
        server_engine.dispose()


# Function to create tables
def create_tables(engine):
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}")
        raise
