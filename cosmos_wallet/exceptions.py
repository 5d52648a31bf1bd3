"""Custom exceptions for the cosmos-wallet session layer."""

from cosmos_wallet.models import Operation


class WalletError(Exception):
    """Base exception for all wallet session errors."""

    pass


# =============================================================================
# Precondition Exceptions
# =============================================================================


class PreconditionError(WalletError):
    """Raised when the session is not in the state an operation requires.

    Always raised before any network interaction is attempted.
    """

    pass


class WalletNotInitializedError(PreconditionError):
    """Raised when no key material has been created or imported yet."""

    def __init__(self, message: str = "Wallet not initialized") -> None:
        super().__init__(message)


class ClientNotInitializedError(PreconditionError):
    """Raised when the signing client has not been connected."""

    def __init__(self, message: str = "Client not initialized") -> None:
        super().__init__(message)


class QueryClientNotInitializedError(PreconditionError):
    """Raised when the read-only query client has not been connected."""

    def __init__(self, message: str = "Query client not initialized") -> None:
        super().__init__(message)


class InvalidVoteOptionError(WalletError, ValueError):
    """Raised when a vote option is outside Yes/No/NoWithVeto/Abstain."""

    pass


# =============================================================================
# Upstream Failure Exceptions
# =============================================================================


class OperationError(WalletError):
    """Raised when a delegated call fails.

    Attributes:
        operation: Which session operation failed.
        cause: The original exception raised by the collaborator.
    """

    def __init__(self, operation: Operation, cause: BaseException) -> None:
        super().__init__(f"Failed to {operation.action}: {cause}")
        self.operation = operation
        self.cause = cause


class WalletCreationError(OperationError):
    """Raised when key derivation or generation fails."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(Operation.CREATE_WALLET, cause)


class ChainConnectionError(OperationError):
    """Raised when the signing or query client cannot be established."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(Operation.CONNECT, cause)


class TransportUnavailableError(ChainConnectionError):
    """Raised when the default chain transport library is not installed."""

    pass


class TransactionError(OperationError):
    """Raised when building, signing or broadcasting a transaction fails."""

    pass


class QueryError(OperationError):
    """Raised when a chain state read fails."""

    pass
