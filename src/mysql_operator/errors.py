# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""MySQL Operator exceptions."""


class MySQLOperatorError(Exception):
    """Base class for MySQL Operator exceptions."""


class ConfigError(MySQLOperatorError):
    """Raised when the operator configuration is invalid."""


class PhaseTransitionError(MySQLOperatorError):
    """Raised when a status write is not a legal forward phase transition."""


class InvalidPhaseError(PhaseTransitionError, ValueError):
    """Raised when a stored phase is not a member of the phase enum."""


class NotFoundError(MySQLOperatorError):
    """Raised when a resource does not exist in the store."""


class ConflictError(MySQLOperatorError):
    """Raised when a write conflicts with the stored state of a resource."""


class PhaseTimeoutError(MySQLOperatorError):
    """Raised when a resource does not reach the expected phase in time."""
