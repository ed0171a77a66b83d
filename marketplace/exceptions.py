"""
Errors raised by the marketplace core.

Each error carries a stable ``code`` for API clients and a ``status_code``
hint the HTTP layer uses when rendering it. None of them are retried: apart
from ``SyncFailure`` they report a violated precondition.
"""


class MarketplaceError(Exception):
    code = "marketplace_error"
    status_code = 400
    default_message = "Marketplace operation failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(MarketplaceError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class NotAvailable(MarketplaceError):
    code = "not_available"
    status_code = 400
    default_message = "Item is no longer available"


class SelfPurchase(MarketplaceError):
    code = "self_purchase"
    status_code = 400
    default_message = "You cannot buy your own item"


class NotOwner(MarketplaceError):
    code = "not_owner"
    status_code = 403
    default_message = "Not authorized"


class ResolutionUnavailable(MarketplaceError):
    code = "resolution_unavailable"
    status_code = 503
    default_message = "Could not determine coordinates for the provided pincodes"


class SyncFailure(MarketplaceError):
    """The reference lists could not be updated; the item change was rolled back."""
    code = "sync_failure"
    status_code = 409
    default_message = "Could not update listing references; the change was reverted"
