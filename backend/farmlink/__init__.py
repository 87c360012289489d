"""FarmLink Marketplace Core — identity, catalog and order workflow for a farm produce marketplace.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
