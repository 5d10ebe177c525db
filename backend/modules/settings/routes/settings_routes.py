# backend/modules/settings/routes/settings_routes.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.config import settings
from core.database import get_db
from modules.realtime.events import EventPublisher
from modules.realtime.websocket.connection_manager import get_event_publisher
from ..schemas.settings_schemas import (
    SettingsResponse,
    TableSettingsResponse,
    TableSettingsUpdate,
    TableSettingsUpdateResponse,
)
from ..services import settings_service

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=SettingsResponse)
async def get_settings_overview(db: Session = Depends(get_db)):
    latitude, longitude = await settings_service.get_restaurant_origin(db)
    return SettingsResponse(
        restaurant_name=await settings_service.get_setting(
            db, settings_service.RESTAURANT_NAME_KEY, settings.restaurant_name
        ),
        table_count=await settings_service.get_table_count(db),
        restaurant_latitude=latitude,
        restaurant_longitude=longitude,
        settings=await settings_service.get_all_settings(db),
    )


@router.get("/tables", response_model=TableSettingsResponse)
async def get_table_settings(db: Session = Depends(get_db)):
    return TableSettingsResponse(table_count=await settings_service.get_table_count(db))


@router.post("/tables", response_model=TableSettingsUpdateResponse)
async def update_table_settings(
    payload: TableSettingsUpdate,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    """
    Change the number of tables on the floor.

    Connected dashboards receive ``settingsUpdated`` with the new count.
    """
    table_count = await settings_service.set_table_count(
        db, payload.table_count, publisher
    )
    return TableSettingsUpdateResponse(
        message="Table settings updated successfully",
        table_count=table_count,
    )
