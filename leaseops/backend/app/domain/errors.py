# app/domain/errors.py
from __future__ import annotations


class ListingImportError(Exception):
    """Base for everything the listing import/sync path raises on purpose."""

    category = "listing_import_error"


class InvalidListingUrl(ListingImportError):
    """URL is not a recognized provider listing shape. Rejected before any network call."""

    category = "invalid_url"


class IdentifierUnresolved(ListingImportError):
    """Provider URL, but neither a listing id nor a parseable address slug."""

    category = "identifier_unresolved"


class UpstreamUnavailable(ListingImportError):
    """Authoritative API tier failed (status, transport, timeout). Never surfaced to callers."""

    category = "upstream_unavailable"


class PageFetchFailed(ListingImportError):
    """Listing page fetch failed or came back empty. Converted into a limited-data result."""

    category = "scrape_degraded"


class PropertyNotFound(ListingImportError):
    category = "property_not_found"


class SyncInProgress(ListingImportError):
    """Another sync for the same property is still in flight."""

    category = "sync_in_progress"


class CommitCoercionFailure(ListingImportError):
    """An approved diff value could not be coerced to the target column type."""

    category = "commit_coercion_failure"

    def __init__(self, field_key: str, incoming: str, reason: str) -> None:
        super().__init__(f"{field_key}: cannot apply {incoming!r} ({reason})")
        self.field_key = field_key
        self.incoming = incoming
        self.reason = reason
