"""Custom exceptions for the Flores&Boxes backend."""


class FloresBoxesError(Exception):
    """Base exception for all backend errors."""

    pass


class IntegrationNotConfiguredError(FloresBoxesError):
    """Raised when an external integration is called without its credentials."""

    def __init__(self, integration: str, setting: str):
        self.integration = integration
        self.setting = setting
        super().__init__(f"{integration} is not configured. Set {setting} in the environment.")


class IntegrationError(FloresBoxesError):
    """Raised when an external service call fails or answers with an error."""

    def __init__(self, integration: str, message: str, status_code: int | None = None):
        self.integration = integration
        self.status_code = status_code
        msg = f"{integration} request failed: {message}"
        if status_code is not None:
            msg = f"{integration} request failed ({status_code}): {message}"
        super().__init__(msg)


class OrderNotFoundError(FloresBoxesError):
    """Raised when an order id doesn't exist."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class InvalidOrderStatusError(FloresBoxesError):
    """Raised when an order status outside the known set is requested."""

    def __init__(self, status: str, allowed: list[str]):
        self.status = status
        self.allowed = allowed
        super().__init__(f"Invalid order status '{status}'. Allowed: {', '.join(allowed)}")


class DuplicateLeadError(FloresBoxesError):
    """Raised when a concurrent insert already claimed a lead email."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Lead already exists: {email}")


class MalformedNotificationError(FloresBoxesError):
    """Raised when a payment notification arrives without the payment id."""

    def __init__(self, topic: str):
        self.topic = topic
        super().__init__(f"Notification of type '{topic}' carries no data.id")
