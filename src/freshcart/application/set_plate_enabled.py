"""Application service: Set Plate Enabled use case (administrative).

Flips only the administrative switch. The derived availability stays
whatever propagation last computed.
"""

from __future__ import annotations

import structlog

from freshcart.application.dto import PlateDTO
from freshcart.domain.exceptions import EntityNotFoundError
from freshcart.domain.repository.plate_repository import PlateRepository

logger = structlog.get_logger(__name__)


class SetPlateEnabledHandler:

    def __init__(self, plate_repo: PlateRepository) -> None:
        self._plate_repo = plate_repo

    def handle(self, plate_id: str, enabled: bool) -> PlateDTO:
        plate = self._plate_repo.get_by_id(plate_id)
        if plate is None:
            raise EntityNotFoundError(f"Plate '{plate_id}' not found")

        if enabled:
            plate.enable()
        else:
            plate.disable()
        self._plate_repo.save(plate)

        logger.info("Plate switched", plate_id=plate_id, enabled=enabled)
        return PlateDTO(
            id=plate.id,
            name=plate.name,
            price=str(plate.price),
            available=plate.available,
            admin_disabled=plate.admin_disabled,
        )
