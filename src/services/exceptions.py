"""Shared exceptions for service layer operations."""


class NotFoundError(Exception):
    """
    Raised when an entity is absent or a reference does not resolve.

    Covers notes, aliases, revisions, authors, users and history entries.
    Routers translate it to HTTP 404.
    """

    def __init__(self, entity: str, identifier: str | int) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} '{identifier}' not found")


class ForbiddenIdentifierError(Exception):
    """Raised when a note reference uses a reserved identifier (HTTP 400)."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"'{identifier}' is a forbidden note identifier")


class AliasConflictError(Exception):
    """Raised when an alias is already taken by another note."""

    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"Alias '{alias}' is already in use")
