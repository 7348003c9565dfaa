# migrations/env.py
from __future__ import annotations

import logging
import os
import sys
from logging.config import fileConfig

from alembic import context

# Project root on sys.path so "import agencyhub" works when alembic is run directly.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

config = context.config

if config.config_file_name:
    try:
        fileConfig(config.config_file_name, disable_existing_loggers=False)
    except KeyError:
        # alembic.ini without logging sections
        pass

logger = logging.getLogger("alembic.env")

# -----------------------------------------------------------------------------
# Two ways in:
# - "flask db ..." (Flask-Migrate): engine and metadata come from the app.
# - plain "alembic ..." with DATABASE_URL set (CI / release step): no app.
# -----------------------------------------------------------------------------
DB_URL = os.getenv("DATABASE_URL")


def _escape(url: str) -> str:
    # ConfigParser interpolation
    return url.replace("%", "%%")


def _flask_engine():
    from flask import current_app

    return current_app.extensions["migrate"].db.engine


def _metadata():
    from agencyhub import models  # noqa: F401  (registers tables)
    from agencyhub.extensions import db

    return db.metadata


def process_revision_directives(ctx, revision, directives):
    """Skip writing an autogenerate revision when nothing changed."""
    cmd_opts = getattr(config, "cmd_opts", None)
    if cmd_opts and getattr(cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []
            logger.info("No changes in schema detected.")


def _configure_args() -> dict:
    args = {
        "target_metadata": _metadata(),
        "compare_type": True,
        "process_revision_directives": process_revision_directives,
    }
    if not DB_URL:
        from flask import current_app

        args.update(current_app.extensions["migrate"].configure_args or {})
    return args


if DB_URL:
    config.set_main_option("sqlalchemy.url", _escape(DB_URL))
else:
    config.set_main_option(
        "sqlalchemy.url",
        _escape(_flask_engine().url.render_as_string(hide_password=False)),
    )


def run_migrations_offline():
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        **_configure_args(),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    if DB_URL:
        from sqlalchemy import create_engine

        connectable = create_engine(config.get_main_option("sqlalchemy.url"))
    else:
        connectable = _flask_engine()

    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_args())
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
