import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from models.base_model import Base
from models.user import User  # noqa: F401  (registers tables on Base.metadata)
from models.refresh_token import RefreshToken  # noqa: F401
from models.note import Note  # noqa: F401

logger = logging.getLogger(__name__)


class DBStorage:
    __engine = None
    __session = None

    def _create_engine(self, database_url: str, echo: bool = False):
        """Build the engine; in-memory SQLite gets one shared connection."""
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            engine = create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

        # Enable SQLite foreign keys (needed for ON DELETE CASCADE)
        if engine.url.get_backend_name() == "sqlite":
            @event.listens_for(engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()
        return engine

    def reload(self, database_url: str, echo: bool = False):
        """Bind to database_url, create tables and start a scoped session"""
        if self.__session is not None:
            self.__session.remove()
        if self.__engine is not None:
            self.__engine.dispose()

        self.__engine = self._create_engine(database_url, echo=echo)
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)
        logger.info("Storage bound to %s", self.__engine.url.render_as_string(hide_password=True))

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            self.__session.commit()
        except SQLAlchemyError:
            self.__session.rollback()
            raise

    def delete(self, obj=None):
        """Delete object if exists (hard delete)"""
        if obj:
            self.__session.delete(obj)

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        return self.__session.get(cls, id)

    def close(self):
        """Remove session (for API teardown)"""
        if self.__session is not None:
            self.__session.remove()

    # expose the SQLAlchemy session for advanced querying (joins, filters, etc.)
    def get_session(self):
        return self.__session
