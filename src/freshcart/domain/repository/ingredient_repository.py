"""Abstract repository for Ingredient aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (SQL, in-memory)
live in the infrastructure layer and the test suite.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from freshcart.domain.model.ingredient import Ingredient


class IngredientRepository(ABC):

    @abstractmethod
    def get_by_id(self, ingredient_id: str) -> Ingredient | None:
        """Return an ingredient by its ID, or None if not found."""

    @abstractmethod
    def get_many(self, ingredient_ids: set[str]) -> dict[str, Ingredient]:
        """Return the ingredients that exist among ``ingredient_ids``."""

    @abstractmethod
    def list_all(self) -> list[Ingredient]:
        """Return every ingredient."""

    @abstractmethod
    def save(self, ingredient: Ingredient) -> None:
        """Persist a new or updated ingredient (administrative path)."""
