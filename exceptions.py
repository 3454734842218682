"""Exception hierarchy for the LeaseKeeper backend."""


class LeaseKeeperError(Exception):
     """Base exception for all LeaseKeeper errors."""


class EntityNotFoundError(LeaseKeeperError):
     """Raised when a lease, payment, request or offer does not exist."""


class InvalidEntityStateError(LeaseKeeperError):
     """Raised when an entity is in the wrong state for the operation."""


class ValidationError(LeaseKeeperError):
     """Raised when input values are rejected by a service."""


class ConcurrentUpdateError(LeaseKeeperError):
     """Raised when a row was changed by someone else since it was read."""


class ConfigurationError(LeaseKeeperError):
     """Raised when configuration is invalid or missing."""


class NotificationDeliveryError(LeaseKeeperError):
     """Raised when an external notification channel rejects a message."""
