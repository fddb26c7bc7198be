"""Domain-specific exceptions."""

VALIDATION_MESSAGE = "Please enter a book title to search."
NO_RESULTS_MESSAGE = "No books found. Try another title."
NETWORK_ERROR_MESSAGE = "Network error! Please try again later."


class ServiceError(Exception):
    pass


class SearchError(ServiceError):
    """A search attempt that ends in a failed status with a fixed message."""

    user_message: str = NETWORK_ERROR_MESSAGE

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.user_message)


class QueryValidationError(SearchError):
    user_message = VALIDATION_MESSAGE


class NoResultsError(SearchError):
    user_message = NO_RESULTS_MESSAGE


class SearchTransportError(SearchError):
    user_message = NETWORK_ERROR_MESSAGE


class SelectionError(ServiceError):
    pass


__all__ = [
    "NETWORK_ERROR_MESSAGE",
    "NO_RESULTS_MESSAGE",
    "NoResultsError",
    "QueryValidationError",
    "SearchError",
    "SearchTransportError",
    "SelectionError",
    "ServiceError",
    "VALIDATION_MESSAGE",
]
