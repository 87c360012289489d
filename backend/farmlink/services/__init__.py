"""Services Layer — identity cache, catalog, order workflow, order views, accounts.

Invariants:
    - Services depend on core Protocols, never on a concrete store
    - Every store access goes through store.transaction()

Design Decisions:
    - One service per concern, wired together in main.open_marketplace()
"""
