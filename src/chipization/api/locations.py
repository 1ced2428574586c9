"""Location point endpoints."""

from fastapi import APIRouter, Depends, Path, Response, status

from ..auth.dependencies import require_user
from ..core.location_points import LocationPointStore
from ..db.models import Account
from .dependencies import get_location_store
from .schemas import LocationPointRequest, LocationPointResponse, ProblemDetails

router = APIRouter(prefix="/locations", tags=["locations"])

NOT_FOUND = {404: {"model": ProblemDetails, "description": "Location point not found"}}


@router.get("/{point_id}", response_model=LocationPointResponse, responses=NOT_FOUND)
async def get_location(
    point_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    store: LocationPointStore = Depends(get_location_store),
):
    return LocationPointResponse.model_validate(await store.get(point_id))


@router.post(
    "",
    response_model=LocationPointResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ProblemDetails, "description": "Coordinates already taken"}},
)
async def create_location(
    request: LocationPointRequest,
    _: Account = Depends(require_user),
    store: LocationPointStore = Depends(get_location_store),
):
    point = await store.add(request.latitude, request.longitude)
    return LocationPointResponse.model_validate(point)


@router.put(
    "/{point_id}",
    response_model=LocationPointResponse,
    responses={
        **NOT_FOUND,
        409: {"model": ProblemDetails, "description": "Coordinates already taken"},
    },
)
async def update_location(
    request: LocationPointRequest,
    point_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    store: LocationPointStore = Depends(get_location_store),
):
    point = await store.update(point_id, request.latitude, request.longitude)
    return LocationPointResponse.model_validate(point)


@router.delete(
    "/{point_id}",
    responses={
        **NOT_FOUND,
        409: {"model": ProblemDetails, "description": "Point is still referenced"},
    },
)
async def delete_location(
    point_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    store: LocationPointStore = Depends(get_location_store),
):
    await store.remove(point_id)
    return Response(status_code=status.HTTP_200_OK)
