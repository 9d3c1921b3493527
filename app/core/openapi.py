"""
OpenAPI schema customizations for drf-spectacular.

Tag naming follows the pattern: [App Name] - [Group Name]
Examples:
- Auth (token endpoints)
- Auth - User (current user)
- Chat - Conversations
- Chat - Messages
"""

# Natural language summaries for simplejwt endpoints
# Maps operation_id to (summary, description)
TOKEN_SUMMARIES = {
    "auth_token_create": (
        "Obtain tokens",
        "Authenticate with email and password to receive a JWT access/refresh pair.",
    ),
    "auth_token_refresh_create": (
        "Refresh access token",
        "Get a new access token using a valid refresh token.",
    ),
}


def group_endpoints(result, generator, request, public):
    """
    Postprocessing hook to group API endpoints by function.

    Chat views set their tags through @extend_schema; this hook only
    tags the auth endpoints and adds summaries for the simplejwt views,
    which carry no schema decorations of their own.
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

            if operation_id.startswith("auth_me_"):
                operation["tags"] = ["Auth - User"]
            elif operation_id.startswith("auth_"):
                operation["tags"] = ["Auth"]

    result["tags"] = [
        {
            "name": "Auth",
            "description": "JWT token issuance and refresh.",
        },
        {
            "name": "Auth - User",
            "description": "Current user retrieval.",
        },
        {
            "name": "Chat - Conversations",
            "description": "Conversation summaries, lazy get-or-create and read state.",
        },
        {
            "name": "Chat - Messages",
            "description": "Message history, sending (with lazy conversation creation) and read receipts.",
        },
    ]

    return result
