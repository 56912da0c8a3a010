"""Administrative actions exposed to the host UI."""

from adolinks.web.connectivity_check import (
    ConnectivityCheck,
    ConnectivityCheckMessage,
    ConnectivityCheckResponse,
    MessageCategory,
)

__all__ = [
    "ConnectivityCheck",
    "ConnectivityCheckMessage",
    "ConnectivityCheckResponse",
    "MessageCategory",
]
