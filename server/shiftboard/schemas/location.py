from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from uuid import UUID


class LocationResponse(BaseModel):
    id: UUID
    company_id: UUID
    name: str
    address: Optional[str] = None
    timezone: Optional[str] = None
    is_headquarters: bool
    is_active: bool
    # Only returned to callers who manage locations
    kiosk_token: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class KioskTokenResponse(BaseModel):
    location_id: UUID
    kiosk_token: str
