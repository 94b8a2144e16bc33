import logging
import time
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Owns the engine and session factory for one datastore.

    Nothing is opened until ``connect()`` is called; ``close()`` disposes the
    connection pool. Components never reach for a global connection, they get
    a ``Session`` from ``session()`` (or from the ``get_db`` dependency).
    """

    def __init__(self, url: str):
        self.url = url
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def connected(self) -> bool:
        return self.engine is not None

    def connect(self, **engine_kwargs) -> Engine:
        if self.engine is not None:
            return self.engine
        if self.url.startswith("sqlite"):
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        else:
            engine_kwargs.setdefault("pool_pre_ping", True)
        self.engine = create_engine(self.url, **engine_kwargs)
        self._session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )
        return self.engine

    def close(self):
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self._session_factory = None

    def session(self) -> Session:
        if self._session_factory is None:
            self.connect()
        return self._session_factory()

    def create_all(self, retries: int = 1, interval: float = 0):
        # Wait for database to be ready and create tables
        engine = self.connect()
        attempt = 0
        while True:
            try:
                Base.metadata.create_all(bind=engine)
                logger.info("Database tables created successfully")
                return
            except Exception as e:
                attempt += 1
                logger.warning(f"Database connection attempt {attempt} failed: {str(e)}")
                if attempt >= retries:
                    logger.error("Max retries reached. Could not connect to database.")
                    raise
                time.sleep(interval)

    def ping(self) -> bool:
        with self.connect().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True


database = Database(settings.database_url)


def get_db():
    db = database.session()
    try:
        yield db
    finally:
        db.close()
