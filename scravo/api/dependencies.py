"""
API Dependencies.

Shared dependencies for handler groups (parsed payload, database).
"""

from typing import Annotated, Any, Protocol

from fastapi import Depends, Request


class DatabaseClient(Protocol):
    """What the pipeline needs from the database collaborator."""

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def ping(self) -> bool: ...


def get_payload(request: Request) -> Any:
    """
    Get the request body decoded by BodyParserMiddleware.

    Returns:
        Parsed JSON or form payload, `{}` when the request had none
    """
    return getattr(request.state, "payload", {})


def get_database(request: Request) -> DatabaseClient:
    """Get the database collaborator connected at startup."""
    return request.app.state.database


# Type aliases for dependency injection
Payload = Annotated[Any, Depends(get_payload)]
Database = Annotated[DatabaseClient, Depends(get_database)]
