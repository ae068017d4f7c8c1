"""
Files-CRUD Auth - credential and session core untuk multi-tenant file storage service.

Package ini menyediakan:
- Password hashing registry dengan lazy migration antar versi
- Account lockout setelah percobaan login gagal berulang
- Stateless JWT sessions dengan signing key rotation
- Persistence backends: memory, SQL (SQLAlchemy async), dan Redis

Built with FastAPI, SQLAlchemy, dan Redis.
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Package metadata
__all__ = [
    "__version__",
    "__license__",
]
