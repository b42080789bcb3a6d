"""
Transaction boundary for rundown edits.

The CLI opens one ``session()`` per command and the HTTP API gets one
``get_db()`` session per request. Use cases commit once at the end of a
successful edit; any exception raised on the way (a rejected reorder set, a
talent limit, a store failure) rolls back everything the request wrote,
including sibling shifts and renumbering already flushed.
"""

from __future__ import annotations

import contextlib
from collections.abc import Generator

from sqlalchemy.orm import Session

from . import db as db_module


@contextlib.contextmanager
def session() -> Generator[Session, None, None]:
    """
    Session for one CLI command.

    Commits whatever is still pending when the block exits cleanly, rolls back
    when it raises (``typer.Exit`` included) and always closes. The factory is
    looked up on ``db_module`` at call time so tests can point it at a
    temporary database.

    Usage:
        with session() as db:
            show_rundown(db, actor=actor, access=access, rundown_id=rundown_id)
    """
    db = db_module.SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """
    Session for one API request (FastAPI dependency).

    A ``VidpodError`` escaping the route rolls the request back before the
    error handler turns it into a response.
    """
    db = db_module.SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

