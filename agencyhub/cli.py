# agencyhub/cli.py
from __future__ import annotations

from datetime import date
from decimal import Decimal

import click
from flask import Flask
from flask.cli import AppGroup, with_appcontext

from .extensions import db
from .models import Client, Contact, Service
from .services.activity import record_activity
from .services.documents import current_catalog, sweep_overdue_and_expired
from .utils.db import commit_or_rollback

billing_cli = AppGroup("billing", help="Billing maintenance commands.")


# ======================
# Demo data
# ======================
DEMO_CLIENTS = [
    {
        "name": "Harbor Dental Group",
        "website": "harbordental.example",
        "industry": "Healthcare",
        "size": "11-50",
        "contacts": [
            ("Dana Ortiz", "Office Manager", "dana@harbordental.example", "primary"),
            ("Sam Lee", "IT Contractor", "sam@harbordental.example", "technical"),
        ],
        "services": ["website-template", "website-maintenance", "local-seo-setup", "seo-management"],
    },
    {
        "name": "Northside Coffee Co.",
        "website": "northsidecoffee.example",
        "industry": "Hospitality",
        "size": "1-10",
        "contacts": [
            ("Riley Chen", "Owner", "riley@northsidecoffee.example", "primary"),
        ],
        "services": ["chatbot-setup", "chatbot-management", "review-management"],
    },
    {
        "name": "Summit Legal LLP",
        "website": "summitlegal.example",
        "industry": "Legal",
        "size": "51-200",
        "contacts": [
            ("Morgan Blake", "Managing Partner", "morgan@summitlegal.example", "primary"),
            ("Jordan Park", "Systems Admin", "jordan@summitlegal.example", "technical"),
        ],
        "services": ["analytics-dashboard", "dashboard-reports", "email-automation"],
    },
]


def seed_demo_clients() -> list[str]:
    """Create the demo clients that do not exist yet. Returns the names created."""
    catalog = current_catalog()
    created = []

    for entry in DEMO_CLIENTS:
        if Client.query.filter_by(name=entry["name"]).first():
            continue

        client = Client(
            name=entry["name"],
            website=entry["website"],
            industry=entry["industry"],
            size=entry["size"],
            status="active",
        )
        for name, role, email, kind in entry["contacts"]:
            client.contacts.append(
                Contact(name=name, role=role, email=email, type=kind, is_primary=kind == "primary")
            )
        for product_id in entry["services"]:
            product = catalog.get_product_by_id(product_id)
            if product is None:
                continue
            client.services.append(
                Service(
                    name=product.name,
                    type=product.id,
                    description=product.description,
                    cost_per_unit=Decimal(product.unit_price),
                    included=True,
                )
            )
        db.session.add(client)
        created.append(entry["name"])

    if created and commit_or_rollback("Seed demo clients"):
        record_activity("client", f"Seeded {len(created)} demo client(s)", user="cli")
    return created


@click.command("seed-demo")
@with_appcontext
def seed_demo_command():
    """Create demo clients with contacts and services (idempotent)."""
    created = seed_demo_clients()
    if created:
        click.echo(f"Created {len(created)} client(s): {', '.join(created)}")
    else:
        click.echo("Demo clients already present; nothing to do.")


# ======================
# Billing maintenance
# ======================
@billing_cli.command("sweep")
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Evaluate due dates as of this day (YYYY-MM-DD). Defaults to today.",
)
def sweep_command(today):
    """Mark sent invoices past due as overdue and sent quotes past validity as expired."""
    day = today.date() if today else date.today()
    moved = sweep_overdue_and_expired(day)
    if not commit_or_rollback("Billing sweep"):
        raise click.ClickException("Billing sweep failed; nothing was changed.")

    for number in moved["invoices"]:
        record_activity("invoice", f"Invoice {number} is overdue", target=number,
                        status="warning", user="cli", commit=False)
    for number in moved["quotes"]:
        record_activity("quote", f"Quote {number} expired", target=number,
                        status="warning", user="cli", commit=False)
    commit_or_rollback("Record sweep activity")

    click.echo(f"Overdue invoices: {len(moved['invoices'])} {' '.join(moved['invoices'])}".rstrip())
    click.echo(f"Expired quotes: {len(moved['quotes'])} {' '.join(moved['quotes'])}".rstrip())


def register_cli(app: Flask) -> None:
    app.cli.add_command(seed_demo_command)
    app.cli.add_command(billing_cli)
