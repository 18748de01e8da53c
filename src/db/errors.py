# exception hierarchy shared by the store, catalog loader and config


class PosError(Exception):
    """Base class for every error raised by the point-of-sale core."""


class InsufficientInventoryError(PosError):
    """A cart line asks for more units than are currently in stock."""

    def __init__(self, product_name: str, requested: int, available: int):
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient inventory for {product_name} "
            f"(requested {requested}, available {available})"
        )


class EmptyCartError(PosError):
    """Checkout was requested with no cart lines."""


class InvalidCartLineError(PosError):
    """A cart line carries a non-positive quantity or a negative price."""


class StorageError(PosError):
    pass


class StorageReadError(StorageError):
    """Persisted payload could not be read or decoded."""


class StorageWriteError(StorageError):
    """Persisting a payload failed (disk full, locked database, ...)."""


class CatalogError(PosError):
    """The static catalog file is missing or malformed."""


class ConfigError(PosError):
    pass
