# backend/modules/tables/routes/cart_draft_routes.py

from fastapi import APIRouter, Path

from ..schemas.table_schemas import (
    CartCacheStats,
    CartDraftClearResponse,
    CartDraftOut,
    CartDraftSave,
    CartDraftSaveResponse,
)
from ..services.cart_draft_service import cart_draft_service

router = APIRouter(tags=["Cart drafts"])


@router.get("/table-session/{table_id}", response_model=CartDraftOut)
async def get_cart_draft(table_id: int = Path(..., ge=1)):
    cart_items = await cart_draft_service.get_draft(table_id)
    if cart_items is None:
        return CartDraftOut(exists=False, cart_items=[])
    return CartDraftOut(exists=True, cart_items=cart_items)


@router.post("/table-session/{table_id}", response_model=CartDraftSaveResponse)
async def save_cart_draft(draft: CartDraftSave, table_id: int = Path(..., ge=1)):
    await cart_draft_service.save_draft(table_id, draft.cart_items)
    return CartDraftSaveResponse(message=f"Cart saved for table {table_id}")


@router.post("/clear-table-sessions", response_model=CartDraftClearResponse)
async def clear_cart_drafts():
    return CartDraftClearResponse(cleared=await cart_draft_service.clear_all())


@router.get("/cache/stats", response_model=CartCacheStats)
async def get_cache_stats():
    return await cart_draft_service.stats()
