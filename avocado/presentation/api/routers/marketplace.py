from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....application.services.marketplace_service import DEFAULT_PAGE_SIZE, MarketplaceService
from ....core.dependencies import get_marketplace_service
from ....domain.models import MarketplaceItem, User
from ..dependencies import ensure_acting_user, get_current_user
from ..schemas.auth import MessageResponse
from ..schemas.marketplace import (
    ItemCreateRequest,
    ItemCreateResponse,
    ItemDeactivateRequest,
    ItemListResponse,
    ItemResponse,
)

router = APIRouter(prefix="/api/marketplace", tags=["Marketplace"])


@router.get("/items", response_model=ItemListResponse)
async def list_items(
    category: Optional[str] = None,
    item_type: Optional[str] = Query(default=None, alias="type"),
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    sort: Optional[str] = None,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> ItemListResponse:
    items = service.list_items(
        category=category, item_type=item_type, limit=limit, offset=offset, sort=sort
    )
    return ItemListResponse(items=[_serialize_item(item) for item in items], count=len(items))


@router.get("/item", response_model=ItemResponse)
async def get_item(
    item_id: int,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> ItemResponse:
    return _serialize_item(service.get_item(item_id))


@router.post("/create", response_model=ItemCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: ItemCreateRequest,
    user: User = Depends(get_current_user),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> ItemCreateResponse:
    ensure_acting_user(user, payload.owner_id, "owner_id")
    item = service.create_item(
        owner=user,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        item_type=payload.item_type,
        price=payload.price,
        condition=payload.condition,
        dorm_location=payload.dorm_location,
    )
    return ItemCreateResponse(item_id=item.id)


@router.post("/deactivate", response_model=MessageResponse)
async def deactivate_item(
    payload: ItemDeactivateRequest,
    user: User = Depends(get_current_user),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> MessageResponse:
    service.deactivate_item(user, payload.item_id)
    return MessageResponse(message="Item removed")


def _serialize_item(item: MarketplaceItem) -> ItemResponse:
    return ItemResponse(
        item_id=item.id,
        owner_id=item.owner_id,
        seller_name=item.seller_name,
        title=item.title,
        description=item.description,
        category=item.category.value,
        item_type=item.item_type,
        price=item.price,
        condition=item.condition,
        dorm_location=item.dorm_location,
        is_active=item.is_active,
        created_at=item.created_at,
    )
