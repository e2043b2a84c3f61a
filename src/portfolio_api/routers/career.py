from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, Response

from ..auth import require_admin
from ..errors import ValidationError
from ..models import CareerEntry
from ..resources import ResourceClient
from ..schemas import CareerCreate, CareerOut, CareerUpdate, SuccessOut
from ..utils import cors_preflight

router = APIRouter(
    prefix="/api/career",
    tags=["career"],
)


def _get_client(request: Request) -> ResourceClient:
    return request.app.state.clients["career"]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[CareerOut],
    summary="List Career",
    description="All career entries, highest order first.",
)
def list_career(client: ResourceClient = Depends(_get_client)) -> List[CareerEntry]:
    return client.list()  # type: ignore[return-value]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=CareerOut,
    summary="Create Career Entry",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"description": "role, company or period missing"},
        401: {"description": "Missing or wrong admin token"},
    },
)
def create_career_entry(payload: CareerCreate, client: ResourceClient = Depends(_get_client)) -> CareerEntry:
    """
    Create a career entry; stack defaults to [] and order to 0.
    """
    return client.create(payload.model_dump(exclude_none=True))  # type: ignore[return-value]


@router.options("", include_in_schema=False)
def career_options() -> Response:
    return cors_preflight(["GET", "POST"])


@router.put("", include_in_schema=False)
@router.delete("", include_in_schema=False)
def career_missing_id() -> None:
    raise ValidationError("id is required")


# PUBLIC_INTERFACE
@router.put(
    "/{record_id}",
    response_model=SuccessOut,
    summary="Update Career Entry",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "No entry with this id"}},
)
def update_career_entry(
    record_id: str, payload: CareerUpdate, client: ResourceClient = Depends(_get_client)
) -> SuccessOut:
    client.update(record_id, payload.model_dump(exclude_unset=True))
    return SuccessOut()


# PUBLIC_INTERFACE
@router.delete(
    "/{record_id}",
    response_model=SuccessOut,
    summary="Delete Career Entry",
    dependencies=[Depends(require_admin)],
)
def delete_career_entry(record_id: str, client: ResourceClient = Depends(_get_client)) -> SuccessOut:
    client.delete(record_id)
    return SuccessOut()


@router.options("/{record_id}", include_in_schema=False)
def career_item_options(record_id: str) -> Response:
    return cors_preflight(["PUT", "DELETE"])
