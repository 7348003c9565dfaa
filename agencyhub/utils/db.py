# agencyhub/utils/db.py
from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db


# =========================================================
# Small DB helper (SAFE)
# =========================================================
def commit_or_rollback(action: str) -> bool:
    """Commit session; rollback + log on failure. Returns True on success."""
    try:
        db.session.commit()
        return True
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("%s failed", action)
        return False


def get_or_none(model, ident):
    if ident is None:
        return None
    return db.session.get(model, ident)
