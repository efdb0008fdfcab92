"""registry: the service catalog, or one service with its activeUrl."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import ApiResult, EnvelopeStyle
from ideahub.services.registry_service import registry_service

router = APIRouter(tags=["Functions"])


@router.get("/registry", summary="Service registry")
async def registry(
    name: Optional[str] = None,
    db: AsyncSession = Depends(get_db_session),
):
    if name:
        data = await registry_service.get_service(db, name)
    else:
        data = await registry_service.list_services(db)
    return ApiResult(data=data).render(EnvelopeStyle.FUNCTION)
