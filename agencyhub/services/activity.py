# agencyhub/services/activity.py
from __future__ import annotations

from ..extensions import db
from ..models import Activity
from ..utils.db import commit_or_rollback

ACTIVITY_STATUSES = {"success", "warning", "error"}


def record_activity(
    type: str,
    description: str,
    *,
    target: str | None = None,
    status: str = "success",
    user: str | None = None,
    commit: bool = True,
) -> Activity:
    """Append an entry to the activity feed.

    The feed is informational: a failed commit is logged and rolled back but
    does not undo the action being described (that was committed already).
    """
    entry = Activity(
        type=type,
        description=description[:500],
        target=target,
        status=status if status in ACTIVITY_STATUSES else "success",
        user=user,
    )
    db.session.add(entry)
    if commit:
        commit_or_rollback("Record activity")
    return entry
