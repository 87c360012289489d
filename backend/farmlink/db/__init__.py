"""Database Infrastructure — SQLAlchemy declarative Base for the ORM models.

Invariants:
    - Single async engine per process (owned by DatabaseSessionManager)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for hosted PostgreSQL, aiosqlite for tests
"""
