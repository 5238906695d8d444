import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session, declarative_base
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv

# Load environment variables from .env file
# Assuming .env is in the backend root directory (../../..)
backend_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
env_path = os.path.join(backend_dir, '.env')
load_dotenv(env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///outfit_feed.db")


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Worker threads share the engine; each gets its own scoped session
        options = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # In-memory databases must share one connection across threads
            options["poolclass"] = StaticPool
        return options
    # pool_recycle to prevent MySQL connection timeout
    return {"pool_recycle": 3600, "pool_pre_ping": True}


# Create engine
engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Scoped session for thread safety in web apps and queue workers
db_session = scoped_session(SessionLocal)

# Base class for models
Base = declarative_base()


def configure_engine(url: str) -> None:
    """Rebind the global session factory to another database URL"""
    global engine, DATABASE_URL
    db_session.remove()
    DATABASE_URL = url
    engine = create_engine(url, **_engine_options(url))
    SessionLocal.configure(bind=engine)


def init_db():
    """Initialize database tables"""
    import outfit_feed.link_validation.infrastructure.database.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
