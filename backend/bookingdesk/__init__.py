"""
BookingDesk Backend — Application Package Initializer
======================================================

What: Marks the `bookingdesk` directory as a Python package.
Who:  Imported by uvicorn, Alembic, pytest and `python -m bookingdesk`.

Architecture Note:
    The backend is layered the same way for every resource
    (businesses, clients, appointments):

    ┌─────────────────────────────────────┐
    │      Routes (router + handlers)     │  ← HTTP concerns, auth gate
    ├─────────────────────────────────────┤
    │  Services (Repository, ImageManager)│  ← typed errors, no HTTP
    ├─────────────────────────────────────┤
    │   Collaborators (document store,    │  ← swappable adapters
    │   object store, identity verifier)  │
    └─────────────────────────────────────┘

    Routes only translate requests and responses; the exception handlers in
    `main.py` are the single place where typed errors become HTTP statuses.
"""

__version__ = "1.0.0"
