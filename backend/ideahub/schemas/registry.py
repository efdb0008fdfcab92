"""Service registry schemas."""

from datetime import datetime
from typing import Optional

from ideahub.models.service import Service
from ideahub.schemas.common import CamelModel


class ServiceResponse(CamelModel):
    id: str
    name: str
    display_name: str
    description: Optional[str] = None
    port: int
    health_path: str
    version: str
    base_url: Optional[str] = None
    local_url: Optional[str] = None
    dev_url: Optional[str] = None
    prod_url: Optional[str] = None
    environment: str
    status: str
    last_heartbeat: Optional[datetime] = None
    # Set only when a single service is requested by name
    active_url: Optional[str] = None

    @classmethod
    def from_model(cls, service: Service, active_url: Optional[str] = None) -> "ServiceResponse":
        return cls(
            id=service.id,
            name=service.name,
            display_name=service.display_name,
            description=service.description,
            port=service.port,
            health_path=service.health_path,
            version=service.version,
            base_url=service.base_url,
            local_url=service.local_url,
            dev_url=service.dev_url,
            prod_url=service.prod_url,
            environment=service.environment,
            status=service.status,
            last_heartbeat=service.last_heartbeat,
            active_url=active_url,
        )
