# agencyhub/config/__init__.py
"""
agencyhub.config is a PACKAGE.

- Agency identity lives in: agencyhub.config.company
- App runtime settings live in: agencyhub.settings
"""
from __future__ import annotations

from .company import company_context

__all__ = ["company_context"]
