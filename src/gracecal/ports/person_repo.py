"""Person repository interface."""

from typing import Protocol

from gracecal.core.occurrences import Person


class PersonRepository(Protocol):
    """Interface for reading people (birth and join dates)."""

    def list_people(self) -> list[Person]:
        ...
