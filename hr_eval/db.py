from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL, SQL_ECHO

# SQLite needs the same-thread check disabled for the threadpool FastAPI runs sync code in
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Create SQLAlchemy engine
engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
    echo=SQL_ECHO
)

# Create a session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create a base class for declarative models
Base = declarative_base()

# Dependency to get DB session
def get_db():
    """
    Dependency function to get a DB session that will be used in FastAPI endpoints.
    The session is closed automatically after the endpoint function returns.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Function to initialize the database
def init_db():
    """
    Initialize the database by creating all tables.
    Call this function once at application startup.
    """
    # Import models so they register on Base.metadata
    from .models import submission, approval  # noqa: F401

    Base.metadata.create_all(bind=engine)
