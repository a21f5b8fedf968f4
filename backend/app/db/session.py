from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from backend.app.core.config import DATABASE_URL, STORE_TIMEOUT_SECONDS
from backend.app.core.errors import ConflictError, InvalidInputError, ServiceError, StorageFailureError

logger = logging.getLogger(__name__)


def _connect_args(url: str, timeout: float) -> dict:
    backend = make_url(url).get_backend_name()
    if backend == "postgresql":
        return {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    if backend == "sqlite":
        return {"timeout": timeout, "check_same_thread": False}
    return {}


def build_engine(url: str, timeout: float = STORE_TIMEOUT_SECONDS) -> Engine:
    eng = create_engine(
        url,
        pool_pre_ping=True,
        connect_args=_connect_args(url, timeout),
    )

    if eng.dialect.name == "sqlite":
        # SQLite n'applique les FK (RESTRICT / SET NULL) que si on le demande
        @event.listens_for(eng, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return eng


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Unité de travail atomique : un seul commit en sortie, rollback sur toute erreur.

    - ServiceError : propagée telle quelle (rejet métier)
    - IntegrityError : contrainte du store violée -> ConflictError
    - DataError : valeur hors bornes de colonne -> InvalidInputError (non rejouable)
    - autre SQLAlchemyError : store indisponible / contention -> StorageFailureError
    """
    try:
        yield db
        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning("integrity violation, unit of work rolled back: %s", exc.orig)
        raise ConflictError("Operation conflicts with existing data") from exc
    except DataError as exc:
        db.rollback()
        logger.warning("value rejected by the store, unit of work rolled back: %s", exc.orig)
        raise InvalidInputError("Value out of range for storage") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("storage failure, unit of work rolled back: %s", exc)
        raise StorageFailureError("Storage unavailable, please retry") from exc
    except Exception:
        db.rollback()
        raise
