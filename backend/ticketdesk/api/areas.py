"""
Area management endpoints.

WHY: Areas group users and tickets (ADMIN visibility is per area). Only
SUPERADMIN manages them.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.deps import require_roles
from ticketdesk.core.exceptions import (
    AreaNotFoundError,
    ResourceAlreadyExistsError,
    ResourceInUseError,
)
from ticketdesk.dao.area import AreaDAO
from ticketdesk.db.session import get_db
from ticketdesk.models.area import Area
from ticketdesk.models.user import User, UserRole
from ticketdesk.schemas.area import AreaCreate, AreaResponse, AreaUpdate


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/areas", tags=["areas"])

require_superadmin = require_roles(UserRole.SUPERADMIN)


async def _get_area_or_404(area_dao: AreaDAO, area_id: int) -> Area:
    area = await area_dao.get_by_id(area_id)
    if area is None:
        raise AreaNotFoundError(message=f"Area with id {area_id} not found", area_id=area_id)
    return area


async def _ensure_name_free(area_dao: AreaDAO, name: str, area_id: Optional[int] = None) -> None:
    existing = await area_dao.get_by_name(name)
    if existing is not None and existing.id != area_id:
        raise ResourceAlreadyExistsError(
            message=f"Area '{name}' already exists",
            resource_type="Area",
        )


@router.get("", response_model=List[AreaResponse], summary="List areas")
async def list_areas(
    current_user: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
) -> List[Area]:
    return await AreaDAO(db).get_all()


@router.get("/{area_id}", response_model=AreaResponse, summary="Get area")
async def get_area(
    area_id: int,
    current_user: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
) -> Area:
    return await _get_area_or_404(AreaDAO(db), area_id)


@router.post(
    "",
    response_model=AreaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create area",
)
async def create_area(
    data: AreaCreate,
    current_user: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
) -> Area:
    """
    Raises:
        ResourceAlreadyExistsError (409): If the name is taken
    """
    area_dao = AreaDAO(db)
    await _ensure_name_free(area_dao, data.name)
    area = await area_dao.create(name=data.name)
    logger.info("Area %s created", area.id, extra={"user_id": current_user.id})
    return area


@router.put("/{area_id}", response_model=AreaResponse, summary="Rename area")
async def update_area(
    area_id: int,
    data: AreaUpdate,
    current_user: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
) -> Area:
    area_dao = AreaDAO(db)
    area = await _get_area_or_404(area_dao, area_id)
    await _ensure_name_free(area_dao, data.name, area_id=area.id)
    area.name = data.name
    return await area_dao.save(area)


@router.delete(
    "/{area_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete area",
)
async def delete_area(
    area_id: int,
    current_user: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete an area nobody references.

    Raises:
        AreaNotFoundError (404): If the area doesn't exist
        ResourceInUseError (409): If a user or ticket still points at it
    """
    area_dao = AreaDAO(db)
    area = await _get_area_or_404(area_dao, area_id)

    references = await area_dao.count_references(area.id)
    if references:
        raise ResourceInUseError(
            message=f"Area {area.id} is still referenced by users or tickets",
            area_id=area.id,
            references=references,
        )

    await area_dao.delete(area.id)
    logger.info("Area %s deleted", area.id, extra={"user_id": current_user.id})
