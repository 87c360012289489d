"""ORM Models — SQLAlchemy declarative models for the marketplace tables.

Invariants:
    - All models inherit from Base (db/base.py)
    - Rows are never deleted; relationships are read-only back-references (no cascades)

Design Decisions:
    - One file per table for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from farmlink.models.auth_account import AuthAccount  # noqa: F401
from farmlink.models.profile import Profile  # noqa: F401
from farmlink.models.produce import Produce  # noqa: F401
from farmlink.models.order import Order  # noqa: F401
