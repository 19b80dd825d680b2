"""Business logic service layer."""

from chatflow.services.chat_gateway import (  # noqa: F401
    ChatGateway,
    GatewayError,
    InstanceNotFoundError,
    InstanceTerminatedError,
)
