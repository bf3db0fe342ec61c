from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


# Field rules live in core.validation so every error comes back in one
# {"field", "message"} list; these models only fix the JSON shape.
class CreateLinkRequest(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None


class UpdateLinkRequest(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    is_active: Optional[bool] = None


class ReorderLinksRequest(BaseModel):
    link_ids: list[str]


class TrackClickRequest(BaseModel):
    link_id: str


class LinkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    url: str
    description: Optional[str]
    icon: Optional[str] = None
    position: int
    is_active: bool
    click_count: int
    created_at: datetime
    updated_at: datetime


class PublicLinkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    url: str
    description: Optional[str]
    icon: Optional[str] = None
