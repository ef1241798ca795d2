from __future__ import annotations

from fastapi import status


class CatalogError(Exception):
    """Base class for errors that end a request with a user-facing message."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UploadRejectedError(CatalogError):
    pass


class InvalidItemsFileError(CatalogError):
    pass


class EmptyCatalogError(CatalogError):
    status_code = 422


class CatalogNotFoundError(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND


class ItemNotFoundError(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Item with ID {item_id} was not found in the database.")
        self.item_id = item_id


class InvalidQueryError(CatalogError):
    pass


class TooManyMatchesError(CatalogError):
    status_code = 422

    def __init__(self, query: str, count: int, limit: int) -> None:
        super().__init__(
            f"Found {limit} or more matches for '{query}'. "
            "Please use a more specific keyword to narrow down the search."
        )
        self.query = query
        self.count = count
        self.limit = limit


class InvalidControlError(CatalogError):
    pass


class PermissionDeniedError(CatalogError):
    status_code = status.HTTP_403_FORBIDDEN


class TransportError(CatalogError):
    status_code = status.HTTP_502_BAD_GATEWAY
