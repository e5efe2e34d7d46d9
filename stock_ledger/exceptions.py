"""Domain-specific exceptions with user-ready messages for the stock ledger."""


class BusinessLogicException(Exception):
    """Base exception class for business logic errors.

    All business logic exceptions include user-ready messages that can be
    displayed directly in the UI without client-side message construction.
    """

    retryable = False

    def __init__(self, message: str, error_code: str) -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class RecordNotFoundException(BusinessLogicException):
    """Exception raised when a requested record is not found."""

    def __init__(self, resource_type: str, identifier: str | int) -> None:
        message = f"{resource_type} {identifier} was not found"
        super().__init__(message, error_code="RECORD_NOT_FOUND")


class ResourceConflictException(BusinessLogicException):
    """Exception raised when attempting to create a resource that already exists."""

    def __init__(self, resource_type: str, identifier: str | int) -> None:
        message = f"A {resource_type.lower()} with {identifier} already exists"
        super().__init__(message, error_code="RESOURCE_CONFLICT")


class InvalidOperationException(BusinessLogicException):
    """Exception raised when an operation cannot be performed due to business rules."""

    def __init__(self, operation: str, cause: str) -> None:
        self.operation = operation
        self.cause = cause
        message = f"Cannot {operation} because {cause}"
        super().__init__(message, error_code="INVALID_OPERATION")


class InvalidQuantityException(BusinessLogicException):
    """Exception raised when a stock quantity is not a positive integer."""

    def __init__(self, quantity: object) -> None:
        self.quantity = quantity
        message = f"Quantity must be a positive whole number (got {quantity!r})"
        super().__init__(message, error_code="INVALID_QUANTITY")


class SameLocationException(BusinessLogicException):
    """Exception raised when a transfer names the same source and destination."""

    def __init__(self, location: str) -> None:
        message = f"Cannot transfer stock from {location} to itself"
        super().__init__(message, error_code="SAME_LOCATION")


class SourceNotFoundException(BusinessLogicException):
    """Exception raised when the transfer source holds no record of the item."""

    def __init__(self, equipment_key: str, location: str) -> None:
        self.equipment_key = equipment_key
        message = f"{equipment_key} is not stocked at {location}"
        super().__init__(message, error_code="SOURCE_NOT_FOUND")


class InsufficientStockException(BusinessLogicException):
    """Exception raised when there's not enough stock available for an operation."""

    def __init__(self, equipment_key: str, requested: int, available: int, location: str = "") -> None:
        self.requested = requested
        self.available = available
        location_text = f" at {location}" if location else ""
        unit_text = "unit" if available == 1 else "units"
        message = (
            f"Only {available} {unit_text} of {equipment_key} available{location_text} "
            f"(requested {requested})"
        )
        super().__init__(message, error_code="INSUFFICIENT_STOCK")


class ConcurrentModificationException(BusinessLogicException):
    """Exception raised when a stock record changed between read and commit."""

    retryable = True

    def __init__(self, equipment_key: str, location: str) -> None:
        message = (
            f"Stock of {equipment_key} at {location} was changed by another request, "
            "please try again"
        )
        super().__init__(message, error_code="CONCURRENT_MODIFICATION")


class StorageUnavailableException(BusinessLogicException):
    """Exception raised when the database cannot be reached."""

    retryable = True

    def __init__(self, cause: str) -> None:
        message = f"Stock storage is unavailable ({cause})"
        super().__init__(message, error_code="STORAGE_UNAVAILABLE")


class DuplicateTransferSubmissionException(BusinessLogicException):
    """Exception raised when a transfer group id is reused for a different transfer."""

    def __init__(self, transfer_group_id: str) -> None:
        self.transfer_group_id = transfer_group_id
        message = (
            f"Transfer {transfer_group_id} was already submitted with different details"
        )
        super().__init__(message, error_code="DUPLICATE_TRANSFER_SUBMISSION")
