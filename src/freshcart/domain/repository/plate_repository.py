"""Abstract repository for Plate aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from freshcart.domain.model.plate import Plate


class PlateRepository(ABC):

    @abstractmethod
    def get_by_id(self, plate_id: str) -> Plate | None:
        """Return a plate with its recipe, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Plate]:
        """Return every plate with its recipe."""

    @abstractmethod
    def list_using(self, ingredient_ids: set[str]) -> list[Plate]:
        """Return plates whose recipe references any of ``ingredient_ids``."""

    @abstractmethod
    def save(self, plate: Plate) -> None:
        """Persist a new or updated plate, including its recipe."""

    @abstractmethod
    def set_computed_available(self, plate_id: str, available: bool) -> None:
        """Write only the derived availability flag of a plate."""
