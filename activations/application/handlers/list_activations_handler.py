"""
Activation query handlers.

Handlers for admin activation listings and lookups.
"""
from typing import List

from activations.application.dto.activation_dto import ActivationDTO
from activations.application.queries.list_activations import (
    GetActivationQuery,
    ListActivationsQuery,
    ListLicenseActivationsQuery,
)
from activations.ports.activation_repository import ActivationRepository
from core.domain.exceptions import ActivationNotFoundError, LicenseNotFoundError
from core.domain.pagination import Page, PageRequest
from licenses.ports.license_repository import LicenseRepository

ACTIVATION_SORT_FIELDS = {
    "id": "id",
    "hardwareId": "hardware_id",
    "machineName": "machine_name",
    "activatedAt": "activated_at",
    "lastValidation": "last_validation",
    "isActive": "is_active",
}


class ListActivationsHandler:
    """Handler for ListActivationsQuery."""

    def __init__(self, activation_repository: ActivationRepository):
        """Initialize handler with repositories."""
        self.activation_repository = activation_repository

    async def handle(self, query: ListActivationsQuery) -> Page[ActivationDTO]:
        page_request = PageRequest.create(
            ACTIVATION_SORT_FIELDS,
            "activatedAt",
            page=query.page,
            page_size=query.page_size,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )
        page = await self.activation_repository.list(
            page_request,
            license_id=query.license_id,
            is_active=query.is_active,
        )
        return page.map(ActivationDTO.from_entity)


class GetActivationHandler:
    """Handler for GetActivationQuery."""

    def __init__(self, activation_repository: ActivationRepository):
        """Initialize handler with repositories."""
        self.activation_repository = activation_repository

    async def handle(self, query: GetActivationQuery) -> ActivationDTO:
        activation = await self.activation_repository.find_by_id(query.activation_id)
        if not activation:
            raise ActivationNotFoundError(f"Activation {query.activation_id} not found")
        return ActivationDTO.from_entity(activation)


class ListLicenseActivationsHandler:
    """Handler for ListLicenseActivationsQuery."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        activation_repository: ActivationRepository,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.activation_repository = activation_repository

    async def handle(self, query: ListLicenseActivationsQuery) -> List[ActivationDTO]:
        """
        Handle list license activations query.

        Raises:
            LicenseNotFoundError: If the license does not exist
        """
        license = await self.license_repository.find_by_id(query.license_id)
        if not license:
            raise LicenseNotFoundError(f"License {query.license_id} not found")
        activations = await self.activation_repository.find_by_license(license.id)
        return [ActivationDTO.from_entity(activation) for activation in activations]
