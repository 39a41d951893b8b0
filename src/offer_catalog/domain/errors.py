"""Domain errors shared by services and the HTTP layer."""


class OfferCatalogError(Exception):
    """Base class for offer catalog errors."""


class OfferValidationError(OfferCatalogError):
    """Input failed a shape or invariant check; nothing was written."""


class UploadRejectedError(OfferValidationError):
    """An upload grant request was refused before anything was minted."""


class OfferNotFoundError(OfferCatalogError):
    """The referenced offer does not exist."""

    def __init__(self, offer_id: object | None = None) -> None:
        self.offer_id = offer_id
        super().__init__("Offer not found")


class AuthenticationRequired(OfferCatalogError):
    """Missing or invalid session."""

    def __init__(self) -> None:
        super().__init__("Authentication required")


class UploadTransferError(OfferCatalogError):
    """The caller reported that the blob transfer did not complete."""


class UpstreamFailure(OfferCatalogError):
    """The document store or blob store failed.

    The message is safe to show to callers; the underlying exception is kept
    as ``__cause__`` and logged where it is raised.
    """
