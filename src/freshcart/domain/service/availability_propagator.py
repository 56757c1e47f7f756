"""Domain service: Availability Propagator.

Recomputes each plate's derived availability from the ingredient state:
a plate is available when every *required* recipe edge names an
available ingredient with at least ``edge.quantity`` in stock. The
administrative switch on the plate is never written here.

Propagation is idempotent and only writes plates whose derived flag
actually changed.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from freshcart.domain.model.plate import Plate
from freshcart.domain.repository.ingredient_repository import IngredientRepository
from freshcart.domain.repository.plate_repository import PlateRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AvailabilityChange:
    plate_id: str
    plate_name: str
    available: bool


class AvailabilityPropagator:

    def __init__(
        self,
        plate_repo: PlateRepository,
        ingredient_repo: IngredientRepository,
    ) -> None:
        self._plate_repo = plate_repo
        self._ingredient_repo = ingredient_repo

    def propagate(self) -> list[AvailabilityChange]:
        """Re-derive availability for every plate."""
        return self._recompute(self._plate_repo.list_all())

    def propagate_for_ingredients(self, ingredient_ids: set[str]) -> list[AvailabilityChange]:
        """Re-derive availability only for plates touching these ingredients."""
        if not ingredient_ids:
            return []
        return self._recompute(self._plate_repo.list_using(ingredient_ids))

    def _recompute(self, plates: list[Plate]) -> list[AvailabilityChange]:
        needed: set[str] = set()
        for plate in plates:
            needed |= plate.ingredient_ids
        ingredients = self._ingredient_repo.get_many(needed)

        changes: list[AvailabilityChange] = []
        for plate in plates:
            computed = plate.derive_availability(ingredients)
            if computed == plate.computed_available:
                continue
            self._plate_repo.set_computed_available(plate.id, computed)
            plate.computed_available = computed
            changes.append(AvailabilityChange(plate.id, plate.name, computed))
            logger.info(
                "Plate availability changed",
                plate_id=plate.id,
                plate=plate.name,
                available=computed,
            )
        return changes
