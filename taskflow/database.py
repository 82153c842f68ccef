from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from taskflow.config import Settings, get_settings


def build_engine(settings: Settings):
    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        # SQLite connections are shared across the threadpool FastAPI runs sync routes in
        connect_args["check_same_thread"] = False
    elif settings.db_sslmode:
        # Hosted PostgreSQL (Render, Railway) wants sslmode=require
        connect_args["sslmode"] = settings.db_sslmode

    return create_engine(settings.database_url, connect_args=connect_args)


engine = build_engine(get_settings())

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Imported wherever a DB session is needed
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
