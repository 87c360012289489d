"""Catalog Service — loads available listings and serves filtered, sorted views.

Invariants:
    - load_catalog() shows only status 'available', newest first, farmer attached
    - A failed load raises and is recorded in last_error; the last good set is kept
    - Purchases re-read the server copy (fresh_listing); the cached set is display-only
    - Only farmers create listings; a listing created with quantity 0 starts 'sold'
"""

import logging

from farmlink.core.catalog_filters import apply_catalog_view
from farmlink.core.domain_types import (
    CatalogSort,
    ListingId,
    ListingStatus,
    ProfileId,
    UserRole,
)
from farmlink.core.errors import (
    BackendError,
    ErrorContext,
    FarmLinkError,
    NoLongerAvailableError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from farmlink.core.repository_protocols import MarketplaceStore
from farmlink.core.stock import status_for_quantity
from farmlink.schemas.marketplace import (
    Listing,
    ListingCreate,
    ListingWithFarmer,
    Profile,
)

logger = logging.getLogger(__name__)


class CatalogService:
    """Marketplace catalog for buyers, listing management for farmers."""

    def __init__(self, store: MarketplaceStore):
        self.store = store
        self.listings: list[ListingWithFarmer] = []
        self.last_error: FarmLinkError | None = None

    async def load_catalog(self) -> list[ListingWithFarmer]:
        try:
            async with self.store.transaction() as tx:
                rows = await tx.list_listings(
                    status=ListingStatus.AVAILABLE, with_farmer=True,
                )
            if rows is None:
                raise BackendError("no usable payload", "load_catalog")
        except FarmLinkError as e:
            self.last_error = e
            logger.error(
                f"Failed to load marketplace: {e.message}",
                extra={"error_code": e.code},
            )
            raise

        self.listings = list(rows)
        self.last_error = None
        logger.debug(f"Catalog loaded: {len(self.listings)} listing(s)")
        return self.listings

    def view(
        self, term: str = "", mode: CatalogSort | str = CatalogSort.NONE,
    ) -> list[ListingWithFarmer]:
        """Filter the loaded catalog by term, then sort by mode."""
        return apply_catalog_view(self.listings, term, mode)

    async def fresh_listing(self, listing_id: ListingId) -> Listing:
        """Server copy of one listing, which must still be available."""
        async with self.store.transaction() as tx:
            listing = await tx.get_listing(listing_id)
        if listing is None:
            raise ResourceNotFoundError("Listing", str(listing_id))
        if listing.status != ListingStatus.AVAILABLE:
            raise NoLongerAvailableError(str(listing_id), ListingStatus(listing.status).value)
        return listing

    async def list_farmer_listings(self, farmer_id: ProfileId) -> list[Listing]:
        """A farmer's own listings, any status, newest first."""
        async with self.store.transaction() as tx:
            return await tx.list_listings(farmer_id=farmer_id)

    async def create_listing(self, farmer: Profile, data: ListingCreate) -> Listing:
        if UserRole(farmer.role) != UserRole.FARMER:
            raise PermissionDeniedError(
                "Only farmers can list produce.",
                ErrorContext(profile_id=str(farmer.id)),
            )

        async with self.store.transaction() as tx:
            listing = await tx.insert_listing({
                "farmer_id": farmer.id,
                "name": data.name,
                "description": data.description,
                "quantity": data.quantity,
                "unit": data.unit,
                "price": data.price,
                "status": status_for_quantity(data.quantity),
            })

        logger.info(
            "Listing created",
            extra={"listing_id": listing.id, "profile_id": farmer.id},
        )
        return listing
