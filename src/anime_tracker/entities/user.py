"""User domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """A registered user as stored in the database.

    ``password_hash`` never leaves the service layer; DTOs expose the
    public fields only.
    """

    id: str
    email: str
    username: str
    password_hash: str
    created_at: str
