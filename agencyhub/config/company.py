# agencyhub/config/company.py
"""
Single source of truth for the agency identity printed on quotes and invoices.

Values can be overridden per deployment through environment variables so the
same build can serve a white-labelled dashboard.
"""
from __future__ import annotations

import os

# -----------------------------
# Canonical fields
# -----------------------------
COMPANY_NAME = os.environ.get("COMPANY_NAME", "GrayBay IT Services")
COMPANY_TAGLINE = os.environ.get("COMPANY_TAGLINE", "Websites • Chatbots • Analytics")

COMPANY_EMAIL = os.environ.get("COMPANY_EMAIL", "billing@graybay.example")
COMPANY_PHONE = os.environ.get("COMPANY_PHONE", "+1-555-0100")

# Website without protocol
COMPANY_WEBSITE = os.environ.get("COMPANY_WEBSITE", "www.graybay.example")

# Printed under "Terms and Conditions" on quotes
QUOTE_TERMS = [
    "1. All prices are in USD.",
    "2. Monthly services can be cancelled with 30 days notice.",
    "3. Quote valid for 30 days from the date of issue.",
    "4. Prices include standard support during business hours.",
    "5. Additional customization may incur extra charges.",
]

INVOICE_TERMS = "Payment due within 30 days."


def company_context() -> dict:
    """Identity block handed to PDF renderers."""
    return {
        "COMPANY_NAME": COMPANY_NAME,
        "COMPANY_TAGLINE": COMPANY_TAGLINE,
        "COMPANY_EMAIL": COMPANY_EMAIL,
        "COMPANY_PHONE": COMPANY_PHONE,
        "COMPANY_WEBSITE": COMPANY_WEBSITE,
        "QUOTE_TERMS": list(QUOTE_TERMS),
        "INVOICE_TERMS": INVOICE_TERMS,
    }
