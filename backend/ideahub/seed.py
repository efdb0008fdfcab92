"""
Idea Hub Backend — Service Registry Seed
=========================================

Usage:
    python -m ideahub.seed

Upserts the default services into the registry, marks them HEALTHY and
stamps a fresh heartbeat. Safe to run repeatedly.
"""

import asyncio
import logging
import sys
from typing import List, Optional

from ideahub.config import settings
from ideahub.database import DatabaseManager
from ideahub.services.registry_service import registry_service

logger = logging.getLogger("ideahub.seed")

DEFAULT_SERVICES = [
    {
        "name": "main",
        "display_name": "Main Application",
        "description": "Core Idea Hub application: authentication, ideas, social features",
        "port": 8888,
        "health_path": "/api/health",
        "version": "1.0.0",
        "local_url": "http://localhost:8888",
        "prod_url": "https://ideahub.netlify.app",
    },
    {
        "name": "workspace",
        "display_name": "Workspace Editor",
        "description": "Canvas and document editor service",
        "port": 3000,
        "health_path": "/api/health",
        "version": "1.0.0",
        "local_url": "http://localhost:3000",
        "prod_url": "https://workspace.ideahub.com",
    },
]


async def seed_services(manager: DatabaseManager, services: Optional[List[dict]] = None) -> List[str]:
    """Returns the names of the services written."""
    seeded = []
    async with manager.session() as session:
        for spec in services or DEFAULT_SERVICES:
            service = await registry_service.upsert_service(
                session,
                base_url=spec["local_url"],
                environment="development",
                **spec,
            )
            logger.info(
                "Seeded %s (%s) port=%d local=%s id=%s",
                service.display_name,
                service.name,
                service.port,
                service.local_url,
                service.id,
            )
            seeded.append(service.name)
    return seeded


async def main() -> int:
    manager = DatabaseManager.from_settings(settings)
    try:
        await seed_services(manager)
    except Exception:
        logger.exception("Seeding the service registry failed")
        return 1
    finally:
        await manager.dispose()
    logger.info("Service registry seeded successfully")
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    sys.exit(asyncio.run(main()))
