class GalleryError(Exception):
    """Base class for failures that abort an aggregated request."""

    status_code = 500
    public_message = "internal error"


class StorageUnavailable(GalleryError):
    """Listing the object catalog failed (transport, auth or bucket error)."""

    status_code = 503
    public_message = "storage unavailable"


class ProviderUnavailable(GalleryError):
    """The fallback media provider did not answer with a usable response."""

    status_code = 502
    public_message = "media provider unavailable"
