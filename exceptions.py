# ============================================================================
# EXCEPTIONS
# ============================================================================
# STATUS: Shared - used by every layer
# PURPOSE: Exception hierarchy separating contract violations from business failures
# EXPORTS: ContractViolationError, BusinessLogicError, NotFoundError, ForbiddenError,
#          ValidationError, InternalError, StorageError, ConfigurationError
# DEPENDENCIES: None (standard library only)
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues)

Business failures carry a stable ``error_tag`` that the request boundary
returns to callers alongside the human message (see core.errors).
"""


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These indicate:
    - Wrong types passed to functions
    - Repository receives a dict where a model was expected
    - Converter returns something other than a GeoDataFrame

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime business logic failures.

    These are normal failures that occur during system operation
    and should be handled gracefully without crashing.
    """
    error_tag = "InternalError"

    def __init__(self, message: str = "", details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(BusinessLogicError):
    """
    Requested resource does not exist (or is invisible to the principal).

    Examples:
        - Farm metadata document missing
        - Block id not in the farm collection
        - Revision id not in the revision log
        - Document store key absent
    """
    error_tag = "NotFound"


class ForbiddenError(BusinessLogicError):
    """
    Principal is authenticated and can see the farm but lacks the role
    required for the requested mutation.
    """
    error_tag = "Forbidden"


class ValidationError(BusinessLogicError):
    """
    Business validation failed.

    Note: This is different from ContractViolationError.
    This is for business rule validation, not type contracts.

    Examples:
        - Block created without a name or geometry
        - CSV without coordinate columns
        - Empty or corrupted shapefile archive
        - Upload larger than the configured ceiling
        - Invalid dataset status transition
    """
    error_tag = "ValidationError"


class InternalError(BusinessLogicError):
    """
    Store or parse failure with no clearer classification.
    """
    error_tag = "InternalError"


class StorageError(InternalError):
    """
    Document store operation failed.

    Examples:
        - Blob service unavailable
        - Authentication failure against the storage account
        - Stored document is not valid JSON
    """
    pass


class ConfigurationError(Exception):
    """
    System configuration error.

    These are typically fatal and indicate misconfiguration
    that prevents the system from operating.

    Examples:
        - STORAGE_BACKEND set to an unknown value
        - Azure backend selected without account name or connection string
    """
    pass
