"""Infrastructure Layer — remote store adapters and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/
    - All database failures mapped to BackendError at the session manager

Design Decisions:
    - Adapters implement core Protocols structurally; services never see SQLAlchemy
"""
