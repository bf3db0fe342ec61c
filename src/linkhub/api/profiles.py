from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from linkhub.api.deps import get_current_user, json_body
from linkhub.db.models import User
from linkhub.db.session import get_db
from linkhub.schemas.profiles import (
    CreateSocialLinkRequest,
    ProfileResponse,
    PublicPageResponse,
    SocialLinkResponse,
    UpdateProfileRequest,
)
from linkhub.services import profile_service

router = APIRouter(prefix="/api", tags=["profiles"])


@router.get("/profile", response_model=ProfileResponse)
def read_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.get_profile(db, user.id)


@router.patch("/profile", response_model=ProfileResponse)
def update_profile(
    user: User = Depends(get_current_user),
    req: UpdateProfileRequest = Depends(json_body(UpdateProfileRequest)),
    db: Session = Depends(get_db),
):
    return profile_service.update_profile(db, user.id, req.model_dump(exclude_unset=True))


@router.get("/profile/social-links", response_model=list[SocialLinkResponse])
def list_social_links(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.list_social_links(db, user.id)


@router.post(
    "/profile/social-links",
    response_model=SocialLinkResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_social_link(
    user: User = Depends(get_current_user),
    req: CreateSocialLinkRequest = Depends(json_body(CreateSocialLinkRequest)),
    db: Session = Depends(get_db),
):
    return profile_service.add_social_link(db, user.id, req.model_dump())


@router.delete("/profile/social-links/{social_link_id}")
def delete_social_link(
    social_link_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile_service.delete_social_link(db, user.id, social_link_id)
    return {"success": True}


@router.get("/public/{username}", response_model=PublicPageResponse)
def public_page(username: str, db: Session = Depends(get_db)):
    page = profile_service.get_public_page(db, username)
    return PublicPageResponse.model_validate(page, from_attributes=True)
