"""Identity value types shared by the genealogy source and the tag store."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class OwnerId:
    """RootsMagic ``OwnerID`` of a person.

    Tag ids are assigned by the tag store and can change when another consumer
    deletes and recreates a node. The owner id is the join key that survives, and
    it is stored on tags as a text property.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"OwnerId expects an int, got {type(self.value).__name__}")
        if self.value <= 0:
            raise ValueError(f"OwnerId must be positive, got {self.value}")

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def parse(cls, text: str) -> OwnerId:
        """Parse a stored property value; raises ``ValueError`` for malformed text."""

        return cls(int(text.strip()))
