"""
AccountHub Backend — Application Package Initializer
======================================================

What: Marks the `accounthub` directory as a Python package.
Why:  Enables module imports like `from accounthub.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend keeps the same layered shape for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Group API, Registration)│  ← Orchestration
    ├─────────────────────────────────────┤
    │  Forms (binding) │ Managers (CRUD)  │  ← Injected collaborators
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services only talk to the narrow manager and form interfaces, so tests
    swap in in-memory managers without touching a database.
"""

__version__ = "1.0.0"
