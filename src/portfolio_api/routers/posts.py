from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, Response

from ..auth import require_admin
from ..errors import ValidationError
from ..models import Post
from ..resources import ResourceClient
from ..schemas import PostCreate, PostOut, PostUpdate, SuccessOut
from ..utils import cors_preflight

# The front end knows this feed as "shitposts".
router = APIRouter(
    prefix="/api/shitposts",
    tags=["posts"],
)


def _get_client(request: Request) -> ResourceClient:
    return request.app.state.clients["posts"]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[PostOut],
    summary="List Posts",
    description="All posts, highest order first.",
)
def list_posts(client: ResourceClient = Depends(_get_client)) -> List[Post]:
    return client.list()  # type: ignore[return-value]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=PostOut,
    summary="Create Post",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"description": "content or date missing"},
        401: {"description": "Missing or wrong admin token"},
    },
)
def create_post(payload: PostCreate, client: ResourceClient = Depends(_get_client)) -> Post:
    """
    Create a post; likes defaults to "0" and order to 0.
    """
    return client.create(payload.model_dump(exclude_none=True))  # type: ignore[return-value]


@router.options("", include_in_schema=False)
def posts_options() -> Response:
    return cors_preflight(["GET", "POST"])


@router.put("", include_in_schema=False)
@router.delete("", include_in_schema=False)
def posts_missing_id() -> None:
    raise ValidationError("id is required")


# PUBLIC_INTERFACE
@router.put(
    "/{record_id}",
    response_model=SuccessOut,
    summary="Update Post",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "No post with this id"}},
)
def update_post(record_id: str, payload: PostUpdate, client: ResourceClient = Depends(_get_client)) -> SuccessOut:
    client.update(record_id, payload.model_dump(exclude_unset=True))
    return SuccessOut()


# PUBLIC_INTERFACE
@router.delete(
    "/{record_id}",
    response_model=SuccessOut,
    summary="Delete Post",
    dependencies=[Depends(require_admin)],
)
def delete_post(record_id: str, client: ResourceClient = Depends(_get_client)) -> SuccessOut:
    client.delete(record_id)
    return SuccessOut()


@router.options("/{record_id}", include_in_schema=False)
def post_item_options(record_id: str) -> Response:
    return cors_preflight(["PUT", "DELETE"])
