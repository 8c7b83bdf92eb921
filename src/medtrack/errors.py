"""Domain error taxonomy for the lifecycle engine.

Errors derive from protean's exception hierarchy so that a raise inside a
command handler rolls back the enclosing Unit of Work, and so the FastAPI
integration can translate them into HTTP responses. Every error keeps the
values that explain the violated rule as attributes, alongside protean's
``{field: [message]}`` messages.
"""

from protean.exceptions import (
    InvalidOperationError,
    ObjectNotFoundError,
    ValidationError,
)


class _Contextual:
    """Exposes the attributes that explain a violated rule as a dict."""

    context_fields: tuple = ()

    @property
    def context(self) -> dict:
        return {name: getattr(self, name) for name in self.context_fields}


class NotFound(_Contextual, ObjectNotFoundError):
    """The referenced entity does not exist."""

    context_fields = ("entity", "identifier")

    def __init__(self, entity: str, identifier) -> None:
        self.entity = entity
        self.identifier = str(identifier)
        super().__init__({"_entity": [f"{entity} with id `{identifier}` does not exist"]})


class Forbidden(_Contextual, InvalidOperationError):
    """The caller lacks ownership of the record or a role that overrides it."""

    context_fields = ("reason",)

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__({"_caller": [reason]})


class Conflict(_Contextual, InvalidOperationError):
    """A value that must be unique is already taken."""

    context_fields = ("field", "value")

    def __init__(self, field: str, value, message: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__({field: [message or f"`{value}` is already in use"]})


class InvalidState(_Contextual, ValidationError):
    """The operation is not permitted from the record's current status."""

    context_fields = ("entity", "current", "operation")

    def __init__(self, entity: str, current: str, operation: str, message: str | None = None) -> None:
        self.entity = entity
        self.current = current
        self.operation = operation
        super().__init__({"status": [message or f"Cannot {operation} a {entity} in '{current}' status"]})


class InvalidTransition(InvalidState):
    """The requested status is not in the allowed set for the current status."""

    context_fields = ("entity", "current", "requested", "allowed")

    def __init__(self, entity: str, current: str, requested: str, allowed) -> None:
        self.requested = requested
        self.allowed = sorted(allowed)
        allowed_text = ", ".join(self.allowed) if self.allowed else "none"
        super().__init__(
            entity,
            current,
            f"transition to '{requested}'",
            message=(f"Invalid status transition from '{current}' to '{requested}'. Allowed: {allowed_text}"),
        )


class InsufficientStock(_Contextual, ValidationError):
    """A reservation asks for more units than are on hand."""

    context_fields = ("item_id", "medication_name", "available", "requested")

    def __init__(self, item_id, medication_name: str, available: int, requested: int) -> None:
        self.item_id = str(item_id)
        self.medication_name = medication_name
        self.available = available
        self.requested = requested
        super().__init__(
            {
                "quantity": [
                    f"Insufficient stock for '{medication_name}'. Available: {available}, Requested: {requested}"
                ]
            }
        )


class PaymentFailed(_Contextual, ValidationError):
    """The payment gateway declined or failed to process a charge."""

    context_fields = ("order_id", "reason")

    def __init__(self, order_id, reason: str) -> None:
        self.order_id = str(order_id)
        self.reason = reason
        super().__init__({"payment": [f"Payment processing failed: {reason}"]})


class RefundFailed(_Contextual, ValidationError):
    """The payment gateway could not refund a captured payment."""

    context_fields = ("order_id", "reason")

    def __init__(self, order_id, reason: str) -> None:
        self.order_id = str(order_id)
        self.reason = reason
        super().__init__({"payment": [f"Refund failed: {reason}"]})
