"""
Idea Hub Backend — Service Registry
====================================

What:  Read access to the service catalog and the upsert used by the seed
       script. `activeUrl` is picked from the configured environment:

        local       → local_url
        codespaces  → dev_url
        production  → prod_url
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.config import settings
from ideahub.database import db_operation, utcnow
from ideahub.exceptions import NotFoundError
from ideahub.models.enums import ServiceStatus
from ideahub.models.service import Service
from ideahub.schemas.registry import ServiceResponse

logger = logging.getLogger(__name__)

_URL_BY_ENVIRONMENT = {
    "local": "local_url",
    "codespaces": "dev_url",
    "production": "prod_url",
}


def active_url(service: Service, environment: Optional[str] = None) -> Optional[str]:
    attribute = _URL_BY_ENVIRONMENT.get(environment or settings.environment, "local_url")
    return getattr(service, attribute) or service.base_url


class RegistryService:

    @db_operation("Could not retrieve services.")
    async def list_services(self, db: AsyncSession) -> List[ServiceResponse]:
        result = await db.execute(select(Service).order_by(Service.name.asc()))
        return [ServiceResponse.from_model(s) for s in result.scalars().all()]

    @db_operation("Could not retrieve the service.")
    async def get_service(self, db: AsyncSession, name: str) -> ServiceResponse:
        result = await db.execute(select(Service).where(Service.name == name))
        service = result.scalar_one_or_none()
        if service is None:
            raise NotFoundError(resource="service", resource_id=name)
        return ServiceResponse.from_model(service, active_url=active_url(service))

    @db_operation("Could not register the service.")
    async def upsert_service(self, db: AsyncSession, **fields) -> Service:
        """Inserts or refreshes a service by name, marking it healthy now."""
        result = await db.execute(select(Service).where(Service.name == fields["name"]))
        service = result.scalar_one_or_none()
        if service is None:
            service = Service(**fields)
            db.add(service)
        else:
            for key, value in fields.items():
                setattr(service, key, value)
        service.status = ServiceStatus.HEALTHY.value
        service.last_heartbeat = utcnow()
        await db.flush()
        return service


registry_service = RegistryService()
