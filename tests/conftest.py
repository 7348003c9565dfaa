from decimal import Decimal

import pytest

from agencyhub import create_app
from agencyhub.billing.catalog import (
    CATEGORY_ADDON,
    CATEGORY_CORE,
    CATEGORY_MONTHLY,
    PRICING_ONE_TIME,
    PRICING_RECURRING,
    Product,
    ProductCatalog,
    default_catalog,
)
from agencyhub.extensions import db
from agencyhub.models import Client, Contact, Service

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "RATELIMIT_ENABLED": False,
    "RATELIMIT_STORAGE_URI": "memory://",
    "STRICT_STATUS_TRANSITIONS": False,
    "DEFAULT_TAX_RATE": "0",
    "LOG_LEVEL": "DEBUG",
}


def make_app(catalog=None, **overrides):
    app = create_app({**TEST_CONFIG, **overrides}, catalog=catalog)
    with app.app_context():
        db.create_all()
    return app


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def tiny_catalog():
    return ProductCatalog([
        Product("setup", "Setup", CATEGORY_CORE, PRICING_ONE_TIME, Decimal("100")),
        Product("hosting", "Hosting", CATEGORY_MONTHLY, PRICING_RECURRING, Decimal("10")),
        Product("extra", "Extra", CATEGORY_ADDON, PRICING_ONE_TIME, Decimal("5")),
    ])


@pytest.fixture
def app():
    app = make_app()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def strict_app():
    app = make_app(STRICT_STATUS_TRANSITIONS=True)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def strict_client(strict_app):
    return strict_app.test_client()


def _seed_client(app, name="Acme Plumbing"):
    with app.app_context():
        c = Client(name=name, website="acme.example", industry="Trades", size="1-10")
        c.contacts.append(Contact(name="Pat", email="pat@acme.example", is_primary=True, type="primary"))
        c.services.append(Service(name="Template Website", type="website-template"))
        c.services.append(Service(name="Website Maintenance", type="website-maintenance"))
        db.session.add(c)
        db.session.commit()
        return c.id


@pytest.fixture
def client_id(app):
    return _seed_client(app)


@pytest.fixture
def strict_client_id(strict_app):
    return _seed_client(strict_app)
