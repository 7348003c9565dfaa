# agencyhub/routes.py
from __future__ import annotations

from flask import Blueprint, jsonify, request

from .extensions import db, write_limit
from .models import Activity
from .services.activity import ACTIVITY_STATUSES
from .utils.db import commit_or_rollback
from .utils.parsing import PayloadError, clean_str, json_body, parse_int
from .utils.serialize import activity_to_dict

main = Blueprint("main", __name__)

ACTIVITY_DEFAULT_LIMIT = 50
ACTIVITY_MAX_LIMIT = 500


# ======================
# Activity feed
# ======================
@main.route("/api/activities", methods=["GET"])
def list_activities():
    q = Activity.query
    for arg, column in (("type", Activity.type), ("status", Activity.status), ("user", Activity.user)):
        value = clean_str(request.args.get(arg))
        if value:
            q = q.filter(column == value)

    limit = parse_int(request.args.get("limit")) or ACTIVITY_DEFAULT_LIMIT
    limit = max(1, min(limit, ACTIVITY_MAX_LIMIT))

    activities = q.order_by(Activity.created_at.desc(), Activity.id.desc()).limit(limit).all()
    return jsonify([activity_to_dict(a) for a in activities])


@main.route("/api/activities", methods=["POST"])
@write_limit()
def create_activity():
    data = json_body()
    activity_type = clean_str(data.get("type"), 40)
    description = clean_str(data.get("description"), 500)
    if not activity_type or not description:
        raise PayloadError("type and description are required")

    status = clean_str(data.get("status")) or "success"
    if status not in ACTIVITY_STATUSES:
        raise PayloadError(f"Invalid activity status: {status}")

    activity = Activity(
        type=activity_type,
        description=description,
        user=clean_str(data.get("user"), 120),
        target=clean_str(data.get("target"), 160),
        status=status,
    )
    db.session.add(activity)
    if not commit_or_rollback("Create activity"):
        return jsonify({"error": "Error creating activity log"}), 500
    return jsonify(activity_to_dict(activity)), 201
