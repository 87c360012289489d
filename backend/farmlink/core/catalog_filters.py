"""Catalog Filters — search and sort predicates over loaded listings.

Invariants:
    - All functions are PURE and return new lists; inputs are never reordered in place
    - Search is a case-insensitive substring match on name OR description
    - Only the empty term matches everything; whitespace is part of the term
    - Filter first, then sort
    - AVAILABLE_ONLY drops quantity 0; NONE and price modes keep it
    - Sorting is stable: equal prices keep their loaded (newest-first) order
"""

from typing import Sequence, TypeVar

from farmlink.core.domain_types import CatalogSort
from farmlink.core.repository_protocols import ListingLike

L = TypeVar("L", bound=ListingLike)


def matches_search(listing: ListingLike, term: str) -> bool:
    needle = (term or "").lower()
    if needle == "":
        return True
    return (
        needle in (listing.name or "").lower()
        or needle in (listing.description or "").lower()
    )


def filter_listings(listings: Sequence[L], term: str) -> list[L]:
    return [listing for listing in listings if matches_search(listing, term)]


def sort_listings(listings: Sequence[L], mode: CatalogSort | str) -> list[L]:
    mode = CatalogSort(mode)
    if mode == CatalogSort.PRICE_ASCENDING:
        return sorted(listings, key=lambda item: item.price)
    if mode == CatalogSort.PRICE_DESCENDING:
        return sorted(listings, key=lambda item: item.price, reverse=True)
    if mode == CatalogSort.AVAILABLE_ONLY:
        return [listing for listing in listings if listing.quantity > 0]
    return list(listings)


def apply_catalog_view(
    listings: Sequence[L], term: str = "", mode: CatalogSort | str = CatalogSort.NONE,
) -> list[L]:
    """Filter by search term, then sort/narrow by mode."""
    return sort_listings(filter_listings(listings, term), mode)
