"""Tests for custom exception hierarchy."""

from exceptions import (
    ConcurrentUpdateError,
    ConfigurationError,
    EntityNotFoundError,
    InvalidEntityStateError,
    LeaseKeeperError,
    NotificationDeliveryError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_lease_keeper_error_is_exception(self) -> None:
        assert isinstance(LeaseKeeperError("test"), Exception)

    def test_entity_not_found_is_lease_keeper_error(self) -> None:
        assert isinstance(EntityNotFoundError("test"), LeaseKeeperError)

    def test_invalid_entity_state_is_lease_keeper_error(self) -> None:
        assert isinstance(InvalidEntityStateError("test"), LeaseKeeperError)

    def test_validation_error_is_lease_keeper_error(self) -> None:
        assert isinstance(ValidationError("test"), LeaseKeeperError)

    def test_concurrent_update_is_lease_keeper_error(self) -> None:
        assert isinstance(ConcurrentUpdateError("test"), LeaseKeeperError)

    def test_configuration_error_is_lease_keeper_error(self) -> None:
        assert isinstance(ConfigurationError("test"), LeaseKeeperError)

    def test_notification_delivery_is_lease_keeper_error(self) -> None:
        assert isinstance(NotificationDeliveryError("test"), LeaseKeeperError)

    def test_exception_message(self) -> None:
        err = EntityNotFoundError("Lease lease-001 not found")
        assert str(err) == "Lease lease-001 not found"
