from __future__ import annotations

from typing import Iterator

from sqlalchemy.orm import Session

from backend.app.db.session import SessionLocal


def get_db() -> Iterator[Session]:
    """Une session par requête ; les services committent via unit_of_work."""
    db = SessionLocal()
    try:
        yield db
    finally:
        # rollback implicite de tout ce qui n'a pas été committé
        db.close()
