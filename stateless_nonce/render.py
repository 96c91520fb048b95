"""Hidden form field markup for nonce tokens."""

from __future__ import annotations

from html import escape


def nonce_field(name: str, nonce: str) -> str:
    """Return a hidden ``<input>`` carrying ``nonce`` under ``name``."""
    return f'<input type="hidden" name="{escape(name, quote=True)}" value="{escape(nonce, quote=True)}">'
