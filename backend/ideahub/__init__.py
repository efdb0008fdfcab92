"""
Idea Hub Backend — Application Package
=======================================

What: REST backend for Idea Hub (ideas, workspaces, comments, collaborators,
      notifications, service registry).
Who:  Imported by uvicorn (`ideahub.main:app`), Alembic, the seed script and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │  Routes (/api) + Functions (/functions) │  ← HTTP concerns, envelopes
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← queries, rules, shaping
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← DatabaseManager, AsyncSession
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
