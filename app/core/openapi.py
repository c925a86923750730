"""
OpenAPI schema customizations for drf-spectacular.

This module provides hooks to customize the generated OpenAPI schema,
adding natural-language summaries to third-party endpoints and tag
descriptions for ReDoc.

Tag naming follows the pattern: [App Name] - [Group Name]
Examples:
- Auth (token issuing and refresh)
- Messaging - Conversations (conversation list, detail, read state)
- Messaging - Messages (sending messages)
"""

# Natural language summaries for simplejwt endpoints
# Maps operation_id to (summary, description)
TOKEN_SUMMARIES = {
    "auth_token_create": (
        "Obtain token pair",
        "Authenticate with email and password to receive JWT access and refresh tokens.",
    ),
    "auth_token_refresh_create": (
        "Refresh access token",
        "Get a new access token using a valid refresh token.",
    ),
}

TAG_DESCRIPTIONS = [
    {
        "name": "Auth",
        "description": "JWT token issuing for API and WebSocket clients.",
    },
    {
        "name": "Messaging - Conversations",
        "description": (
            "Conversations between two users, optionally scoped to one "
            "marketplace item. Listing, message history and read state."
        ),
    },
    {
        "name": "Messaging - Messages",
        "description": (
            "Sending messages. New messages are pushed to the recipient's "
            "WebSocket connections at ws/messages/."
        ),
    },
]


def group_endpoints(result, generator, request, public):
    """
    Postprocessing hook to group API endpoints by function.

    - Adds summaries to simplejwt token endpoints
    - Tags every auth_* operation as "Auth"
    - Appends tag descriptions (messaging tags are set via tags= in views)
    """
    paths = result.get("paths", {})

    for path, methods in paths.items():
        for method, operation in methods.items():
            if not isinstance(operation, dict):
                continue

            operation_id = operation.get("operationId", "")

            if operation_id in TOKEN_SUMMARIES:
                summary, description = TOKEN_SUMMARIES[operation_id]
                operation["summary"] = summary
                operation["description"] = description

            if operation_id.startswith("auth_"):
                operation["tags"] = ["Auth"]

    result["tags"] = TAG_DESCRIPTIONS

    return result
