"""
Exception taxonomy for the token deployer.

Every failure the tooling raises on purpose derives from TokenDeployerError so
entry points can report it with a clean message and a nonzero exit code.
"""


class TokenDeployerError(Exception):
    """Base exception for token deployer errors."""
    pass


class ConfigError(TokenDeployerError):
    """Raised when the token config or environment is missing or invalid."""
    pass


class CompileError(TokenDeployerError):
    """Raised when solc reports at least one error-severity diagnostic."""

    def __init__(self, message: str, diagnostics: list[str] | None = None):
        super().__init__(message)
        self.diagnostics = diagnostics or []


class EstimationError(TokenDeployerError):
    """Raised when gas estimation fails. Deployment recovers with a fixed ceiling."""
    pass


class ChainError(TokenDeployerError):
    """Raised when a transaction reverts, runs out of funds, or the RPC is unreachable."""

    def __init__(self, message: str, tx_hash: str | None = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class NotFoundError(TokenDeployerError):
    """Raised when a token symbol or persisted deployment file is unknown."""
    pass


class ReportWriteError(TokenDeployerError, IOError):
    """Raised when a report, address map, or ABI file cannot be written."""
    pass


class VerificationError(TokenDeployerError):
    """Raised when explorer verification of a single contract fails."""
    pass
