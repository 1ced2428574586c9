"""Animal type endpoints."""

from fastapi import APIRouter, Depends, Path, Response, status

from ..auth.dependencies import require_user
from ..core.type_registry import TypeRegistry
from ..db.models import Account
from .dependencies import get_type_registry
from .schemas import AnimalTypeRequest, AnimalTypeResponse, ProblemDetails

router = APIRouter(prefix="/animals/types", tags=["animal-types"])

NOT_FOUND = {404: {"model": ProblemDetails, "description": "Animal type not found"}}
NAME_TAKEN = {409: {"model": ProblemDetails, "description": "Type name already exists"}}


@router.get("/{type_id}", response_model=AnimalTypeResponse, responses=NOT_FOUND)
async def get_animal_type(
    type_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    registry: TypeRegistry = Depends(get_type_registry),
):
    return AnimalTypeResponse.model_validate(await registry.get(type_id))


@router.post(
    "",
    response_model=AnimalTypeResponse,
    status_code=status.HTTP_201_CREATED,
    responses=NAME_TAKEN,
)
async def create_animal_type(
    request: AnimalTypeRequest,
    _: Account = Depends(require_user),
    registry: TypeRegistry = Depends(get_type_registry),
):
    return AnimalTypeResponse.model_validate(await registry.add(request.name))


@router.put(
    "/{type_id}",
    response_model=AnimalTypeResponse,
    responses={**NOT_FOUND, **NAME_TAKEN},
)
async def update_animal_type(
    request: AnimalTypeRequest,
    type_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    registry: TypeRegistry = Depends(get_type_registry),
):
    return AnimalTypeResponse.model_validate(await registry.update(type_id, request.name))


@router.delete(
    "/{type_id}",
    responses={
        **NOT_FOUND,
        409: {"model": ProblemDetails, "description": "Type is still assigned to animals"},
    },
)
async def delete_animal_type(
    type_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    registry: TypeRegistry = Depends(get_type_registry),
):
    await registry.remove(type_id)
    return Response(status_code=status.HTTP_200_OK)
