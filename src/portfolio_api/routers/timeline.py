from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, Response

from ..auth import require_admin
from ..errors import ValidationError
from ..models import TimelineEntry
from ..resources import ResourceClient
from ..schemas import SuccessOut, TimelineCreate, TimelineOut, TimelineUpdate
from ..utils import cors_preflight

router = APIRouter(
    prefix="/api/timeline",
    tags=["timeline"],
)


def _get_client(request: Request) -> ResourceClient:
    """
    Dependency returning the app's timeline client.
    """
    return request.app.state.clients["timeline"]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TimelineOut],
    summary="List Timeline",
    description="All timeline entries, newest dateValue first.",
)
def list_timeline(client: ResourceClient = Depends(_get_client)) -> List[TimelineEntry]:
    return client.list()  # type: ignore[return-value]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TimelineOut,
    summary="Create Timeline Entry",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"description": "dateValue missing or not an ISO date"},
        401: {"description": "Missing or wrong admin token"},
    },
)
def create_timeline_entry(
    payload: TimelineCreate, client: ResourceClient = Depends(_get_client)
) -> TimelineEntry:
    """
    Create a timeline entry; color defaults to 'bg-emerald-500'.
    """
    return client.create(payload.model_dump(by_alias=True, exclude_none=True))  # type: ignore[return-value]


@router.options("", include_in_schema=False)
def timeline_options() -> Response:
    return cors_preflight(["GET", "POST"])


@router.put("", include_in_schema=False)
@router.delete("", include_in_schema=False)
def timeline_missing_id() -> None:
    raise ValidationError("id is required")


# PUBLIC_INTERFACE
@router.get(
    "/{record_id}",
    response_model=TimelineOut,
    summary="Get Timeline Entry",
    responses={404: {"description": "No entry with this id"}},
)
def get_timeline_entry(record_id: str, client: ResourceClient = Depends(_get_client)) -> TimelineEntry:
    """
    Single entry, as used by the long-form post page.
    """
    return client.get(record_id)  # type: ignore[return-value]


# PUBLIC_INTERFACE
@router.put(
    "/{record_id}",
    response_model=SuccessOut,
    summary="Update Timeline Entry",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "No entry with this id"}},
)
def update_timeline_entry(
    record_id: str, payload: TimelineUpdate, client: ResourceClient = Depends(_get_client)
) -> SuccessOut:
    """
    Partial update: fields absent from the body are left untouched.
    """
    client.update(record_id, payload.model_dump(by_alias=True, exclude_unset=True))
    return SuccessOut()


# PUBLIC_INTERFACE
@router.delete(
    "/{record_id}",
    response_model=SuccessOut,
    summary="Delete Timeline Entry",
    dependencies=[Depends(require_admin)],
)
def delete_timeline_entry(record_id: str, client: ResourceClient = Depends(_get_client)) -> SuccessOut:
    """
    Hard delete. Deleting an id that does not exist also succeeds.
    """
    client.delete(record_id)
    return SuccessOut()


@router.options("/{record_id}", include_in_schema=False)
def timeline_item_options(record_id: str) -> Response:
    return cors_preflight(["GET", "PUT", "DELETE"])
