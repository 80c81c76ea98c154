from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def make_engine(db_path: str, echo: bool = False):
    """Create a SQLAlchemy engine for the SQLite file at `db_path`."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    # FastAPI runs sync handlers in a threadpool, so the connection may cross threads
    return create_engine(
        f"sqlite:///{db_path}",
        echo=echo,
        connect_args={"check_same_thread": False},
    )


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
