from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core.config import settings

# sqlite connections are handed between the threadpool and the event loop
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# Create SQLAlchemy engine using database URL from config
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

# Session factory for database interactions
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Dependency used in FastAPI routes
# Ensures session is properly closed after request
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
