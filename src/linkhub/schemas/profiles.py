from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from linkhub.schemas.links import PublicLinkResponse


class UpdateProfileRequest(BaseModel):
    username: Optional[str] = None
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    theme: Optional[str] = None


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    display_name: Optional[str]
    bio: Optional[str]
    avatar_url: Optional[str]
    theme: str
    created_at: datetime
    updated_at: datetime


class CreateSocialLinkRequest(BaseModel):
    platform: Optional[str] = None
    url: Optional[str] = None


class SocialLinkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    platform: str
    url: str
    created_at: datetime


class PublicPageResponse(BaseModel):
    profile: ProfileResponse
    links: list[PublicLinkResponse]
    social_links: list[SocialLinkResponse]
