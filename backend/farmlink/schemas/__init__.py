"""Pydantic Schemas — validated shapes for rows crossing the store boundary.

Invariants:
    - Schemas validate at system boundary (store rows, caller input, persisted identity)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are contracts, models are persistence
"""
