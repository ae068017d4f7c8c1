"""
Utils module untuk Files-CRUD Auth.
Berisi utilitas helper seperti sumber waktu.
"""

from filescrud.utils.clock import Clock, utcnow, ensure_aware

__all__ = [
    "Clock",
    "utcnow",
    "ensure_aware"
]
