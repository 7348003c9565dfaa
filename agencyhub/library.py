# agencyhub/library.py
from __future__ import annotations

from flask import Blueprint, abort, jsonify

from .extensions import db, write_limit
from .models import TEMPLATE_STATUSES, Template
from .services.activity import record_activity
from .utils.db import commit_or_rollback, get_or_none
from .utils.parsing import PayloadError, clean_str, json_body, parse_int
from .utils.serialize import template_to_dict

library = Blueprint("library", __name__, url_prefix="/api")

# camelCase body key -> (column, maxlen)
TEMPLATE_TEXT_FIELDS = {
    "name": ("name", 160),
    "description": ("description", None),
    "type": ("type", 40),
    "author": ("author", 120),
    "repository": ("repository", 255),
}


def _template_or_404(template_id: int) -> Template:
    template = get_or_none(Template, template_id)
    if template is None:
        abort(404, description="Template not found")
    return template


def _technologies(raw) -> list[str]:
    if not isinstance(raw, list):
        raise PayloadError("technologies must be a list of names")
    return [t for t in (clean_str(x, 60) for x in raw) if t]


def _apply_template_fields(template: Template, data: dict) -> None:
    for key, (attr, maxlen) in TEMPLATE_TEXT_FIELDS.items():
        if key in data:
            setattr(template, attr, clean_str(data.get(key), maxlen))
    if "version" in data:
        template.version = clean_str(data.get("version"), 40) or template.version
    if "status" in data:
        status = clean_str(data.get("status"))
        if status not in TEMPLATE_STATUSES:
            raise PayloadError(f"Invalid template status: {status}")
        template.status = status
    if "technologies" in data:
        template.technologies = _technologies(data.get("technologies"))
    if "usageCount" in data:
        count = parse_int(data.get("usageCount"))
        if count is None or count < 0:
            raise PayloadError("usageCount must be a non-negative integer")
        template.usage_count = count
    if not template.name:
        raise PayloadError("Template name is required")


# ======================
# Templates
# ======================
@library.route("/templates", methods=["GET"])
def list_templates():
    templates = Template.query.order_by(Template.updated_at.desc(), Template.id.desc()).all()
    return jsonify([template_to_dict(t) for t in templates])


@library.route("/templates", methods=["POST"])
@write_limit()
def create_template():
    data = json_body()
    template = Template(technologies=[])
    _apply_template_fields(template, data)

    db.session.add(template)
    if not commit_or_rollback("Create template"):
        return jsonify({"error": "Error creating template"}), 500

    record_activity(
        "template", f'Template "{template.name}" created', target=template.name, user=template.author
    )
    return jsonify(template_to_dict(template)), 201


@library.route("/templates/<int:template_id>", methods=["GET"])
def get_template(template_id):
    return jsonify(template_to_dict(_template_or_404(template_id)))


@library.route("/templates/<int:template_id>", methods=["PUT"])
@write_limit()
def update_template(template_id):
    template = _template_or_404(template_id)
    data = json_body()
    _apply_template_fields(template, data)
    if not commit_or_rollback("Update template"):
        return jsonify({"error": "Error updating template"}), 500

    record_activity(
        "template",
        f'Template "{template.name}" updated',
        target=template.name,
        user=clean_str(data.get("author"), 120),
    )
    return jsonify(template_to_dict(template))


@library.route("/templates/<int:template_id>", methods=["DELETE"])
@write_limit()
def delete_template(template_id):
    template = _template_or_404(template_id)
    name = template.name
    db.session.delete(template)
    if not commit_or_rollback("Delete template"):
        return jsonify({"error": "Error deleting template"}), 500

    record_activity("template", f'Template "{name}" deleted', target=name, user="System")
    return "", 204
