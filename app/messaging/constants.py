"""
Constants and configuration for messaging.

Import example:
    from messaging.constants import MESSAGE_CONFIG, REALTIME_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Content limits (measured after trimming)
    MAX_CONTENT_LENGTH: Final[int] = 10000  # Characters
    MIN_CONTENT_LENGTH: Final[int] = 1

    # Length of the last_message preview on conversation listings
    PREVIEW_LENGTH: Final[int] = 100


# =============================================================================
# Realtime Configuration
# =============================================================================


class REALTIME_CONFIG:
    """Configuration for WebSocket delivery."""

    # Channel layer group per user: "user_<uuid>"
    USER_GROUP_PREFIX: Final[str] = "user_"

    # Channel layer event type; dispatched to MessagingConsumer.message_created
    MESSAGE_CREATED_EVENT: Final[str] = "message.created"

    # Subprotocol name clients use to pass the JWT: ["jwt", "<token>"]
    JWT_SUBPROTOCOL: Final[str] = "jwt"

    # Close codes
    CLOSE_UNAUTHENTICATED: Final[int] = 4001


# =============================================================================
# Error Codes
# =============================================================================


class ERROR_CODES:
    """Machine-readable codes returned in error bodies and socket frames."""

    EMPTY_CONTENT: Final[str] = "EMPTY_CONTENT"
    CONTENT_TOO_LONG: Final[str] = "CONTENT_TOO_LONG"
    INVALID_CONTENT: Final[str] = "INVALID_CONTENT"
    INVALID_SENDER: Final[str] = "INVALID_SENDER"
    INVALID_RECIPIENT: Final[str] = "INVALID_RECIPIENT"
    SAME_USER: Final[str] = "SAME_USER"
    INVALID_ITEM: Final[str] = "INVALID_ITEM"
    CONVERSATION_NOT_FOUND: Final[str] = "CONVERSATION_NOT_FOUND"
    NOT_PARTICIPANT: Final[str] = "NOT_PARTICIPANT"
    UNKNOWN_TYPE: Final[str] = "UNKNOWN_TYPE"
    INVALID_JSON: Final[str] = "INVALID_JSON"
