from __future__ import annotations


class DiscountError(Exception):
    """Base class for every error raised by backer_discounts."""


class ParseError(DiscountError):
    """The uploaded file could not be decoded or read as CSV."""


class EmptyExportError(DiscountError):
    """An export was requested with nothing to export."""


class RowError(DiscountError):
    """A single row failed; the generator records it and moves on.

    The exception text is the message shown to the operator for that row.
    """


class ValidationError(RowError):
    pass


class TransformError(RowError):
    pass


class RemoteProtocolError(RowError):
    """Transport failure, non-2xx status, or top-level GraphQL errors."""


class RemoteValidationError(RowError):
    """Shopify rejected the discount input (``userErrors``)."""


class ResponseFormatError(RowError):
    pass
