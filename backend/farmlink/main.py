"""FarmLink Marketplace — composition root.

Invariants:
    - One Marketplace per process; collaborators constructed explicitly (no auto-discovery)
    - Logging configured before anything else runs
    - Identity rehydrated as provisional, then revalidated before open_marketplace() yields
    - Auth subscription and database pool released on exit

Design Decisions:
    - Async context manager over module globals: mirrors an application lifespan,
      cleaner cleanup, and tests open as many marketplaces as they like
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from farmlink.config import Settings, get_settings
from farmlink.infrastructure.database import DatabaseSessionManager
from farmlink.infrastructure.identity_storage import JsonFileIdentityStorage
from farmlink.infrastructure.observability import setup_logging
from farmlink.infrastructure.sql_auth import DatabaseAuthGateway
from farmlink.infrastructure.sql_store import SqlMarketplaceStore
from farmlink.services.account_service import AccountService
from farmlink.services.catalog_service import CatalogService
from farmlink.services.identity_cache import IdentityCache
from farmlink.services.order_queries import OrderQueries
from farmlink.services.order_workflow import OrderWorkflow

logger = logging.getLogger(__name__)


@dataclass
class Marketplace:
    """Everything a front-end needs, wired to one remote store."""
    settings: Settings
    db: DatabaseSessionManager
    store: SqlMarketplaceStore
    auth: DatabaseAuthGateway
    identity: IdentityCache
    catalog: CatalogService
    orders: OrderWorkflow
    queries: OrderQueries
    accounts: AccountService


def build_marketplace(
    settings: Settings, db: DatabaseSessionManager | None = None,
) -> Marketplace:
    """Construct the object graph without touching the network."""
    db = db or DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    store = SqlMarketplaceStore(db)
    auth = DatabaseAuthGateway(db, session_ttl_minutes=settings.auth_session_ttl_minutes)
    identity = IdentityCache(
        auth,
        store,
        JsonFileIdentityStorage(settings.identity_storage_dir),
        timeout_seconds=settings.remote_timeout_seconds,
    )
    catalog = CatalogService(store)
    return Marketplace(
        settings=settings,
        db=db,
        store=store,
        auth=auth,
        identity=identity,
        catalog=catalog,
        orders=OrderWorkflow(store, catalog=catalog),
        queries=OrderQueries(store),
        accounts=AccountService(auth, store, identity),
    )


@asynccontextmanager
async def open_marketplace(
    settings: Settings | None = None,
    db: DatabaseSessionManager | None = None,
    create_schema: bool = False,
) -> AsyncIterator[Marketplace]:
    """Startup/shutdown lifecycle."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    market = build_marketplace(settings, db)
    if create_schema:
        await market.db.create_schema()

    market.identity.rehydrate()
    market.identity.attach()
    await market.identity.initialize()
    logger.info("FarmLink marketplace started")
    try:
        yield market
    finally:
        market.identity.detach()
        await market.auth.flush_notifications()
        if db is None:
            await market.db.dispose()
        logger.info("FarmLink marketplace shut down")
