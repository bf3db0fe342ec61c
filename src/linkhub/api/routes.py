from fastapi import APIRouter, status, Depends, Response
from sqlalchemy.orm import Session

from linkhub.api.deps import (
    get_current_user,
    json_body,
    links_rate_limiter,
    set_rate_limit_header,
    track_rate_limiter,
)
from linkhub.db.models import User
from linkhub.db.session import get_db
from linkhub.schemas.links import (
    CreateLinkRequest,
    LinkResponse,
    ReorderLinksRequest,
    TrackClickRequest,
    UpdateLinkRequest,
)
from linkhub.services.click_tracker import track_click
from linkhub.services.link_service import LinkMutationService
from linkhub.services.rate_limiter import RateLimitResult

router = APIRouter(prefix="/api/links", tags=["links"])


@router.get("", response_model=list[LinkResponse])
def list_links(
    response: Response,
    user: User = Depends(get_current_user),
    rl: RateLimitResult = Depends(links_rate_limiter("get", write=False)),
    db: Session = Depends(get_db),
):
    links = LinkMutationService(db).list_links(user.id)
    set_rate_limit_header(response, rl)
    return links


@router.post("", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
def create_link(
    response: Response,
    user: User = Depends(get_current_user),
    rl: RateLimitResult = Depends(links_rate_limiter("post")),
    req: CreateLinkRequest = Depends(json_body(CreateLinkRequest)),
    db: Session = Depends(get_db),
):
    link = LinkMutationService(db).create(user.id, req.model_dump(exclude_unset=True))
    set_rate_limit_header(response, rl)
    return link


@router.put("/order", response_model=list[LinkResponse])
def reorder_links(
    response: Response,
    user: User = Depends(get_current_user),
    rl: RateLimitResult = Depends(links_rate_limiter("put")),
    req: ReorderLinksRequest = Depends(json_body(ReorderLinksRequest)),
    db: Session = Depends(get_db),
):
    links = LinkMutationService(db).reorder(user.id, req.link_ids)
    set_rate_limit_header(response, rl)
    return links


@router.post("/track")
def track_link_click(
    response: Response,
    rl: RateLimitResult = Depends(track_rate_limiter),
    req: TrackClickRequest = Depends(json_body(TrackClickRequest)),
    db: Session = Depends(get_db),
):
    track_click(db, req.link_id)
    set_rate_limit_header(response, rl)
    return {"success": True}


@router.patch("/{link_id}", response_model=LinkResponse)
def update_link(
    link_id: str,
    response: Response,
    user: User = Depends(get_current_user),
    rl: RateLimitResult = Depends(links_rate_limiter("patch")),
    req: UpdateLinkRequest = Depends(json_body(UpdateLinkRequest)),
    db: Session = Depends(get_db),
):
    # only fields present in the body are written
    link = LinkMutationService(db).update(user.id, link_id, req.model_dump(exclude_unset=True))
    set_rate_limit_header(response, rl)
    return link


@router.post("/{link_id}/toggle", response_model=LinkResponse)
def toggle_link(
    link_id: str,
    response: Response,
    user: User = Depends(get_current_user),
    rl: RateLimitResult = Depends(links_rate_limiter("patch")),
    db: Session = Depends(get_db),
):
    link = LinkMutationService(db).toggle_active(user.id, link_id)
    set_rate_limit_header(response, rl)
    return link


@router.delete("/{link_id}")
def delete_link(
    link_id: str,
    response: Response,
    user: User = Depends(get_current_user),
    rl: RateLimitResult = Depends(links_rate_limiter("delete")),
    db: Session = Depends(get_db),
):
    LinkMutationService(db).delete(user.id, link_id)
    set_rate_limit_header(response, rl)
    return {"success": True}
