"""Database connections."""

from scravo.connections.postgres import PostgresConnection

__all__ = ["PostgresConnection"]
