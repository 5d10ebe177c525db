# backend/modules/settings/schemas/settings_schemas.py

from typing import Dict, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class TableSettingsUpdate(BaseModel):
    table_count: int = Field(..., ge=1, description="Number of tables on the floor")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TableSettingsResponse(BaseModel):
    table_count: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TableSettingsUpdateResponse(BaseModel):
    success: bool = True
    message: str
    table_count: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SettingsResponse(BaseModel):
    restaurant_name: str
    table_count: int
    restaurant_latitude: float
    restaurant_longitude: float
    settings: Dict[str, Optional[str]]
