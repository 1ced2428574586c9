"""Animal endpoints: chipping, updates, type-set changes and search."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from ..auth.dependencies import require_user
from ..core.enums import Gender, LifeStatus
from ..core.lifecycle_engine import AnimalLifecycleEngine
from ..core.search import SearchFacade
from ..db.models import Account, Animal
from ..domain.criteria import AnimalSearchCriteria, PageWindow
from .dependencies import get_lifecycle_engine, get_page_window, get_search_facade
from .schemas import (
    AnimalCreateRequest,
    AnimalResponse,
    AnimalTypeSwapRequest,
    AnimalUpdateRequest,
    ProblemDetails,
)

router = APIRouter(prefix="/animals", tags=["animals"])

NOT_FOUND = {404: {"model": ProblemDetails, "description": "Animal or referenced entity not found"}}
CONFLICT = {409: {"model": ProblemDetails, "description": "Operation would violate an invariant"}}


async def _respond(search: SearchFacade, animal: Animal) -> AnimalResponse:
    visit_ids = await search.visit_ids([animal])
    return AnimalResponse.from_animal(animal, visit_ids.get(animal.id, []))


# Declared before "/{animal_id}" so "search" is not taken for an id
@router.get("/search", response_model=List[AnimalResponse])
async def search_animals(
    start_date_time: Optional[datetime] = Query(None),
    end_date_time: Optional[datetime] = Query(None),
    chipper_id: Optional[int] = Query(None, gt=0),
    chipping_location_id: Optional[int] = Query(None, gt=0),
    life_status: Optional[LifeStatus] = Query(None),
    gender: Optional[Gender] = Query(None),
    animal_type_id: Optional[int] = Query(None, gt=0),
    min_weight: Optional[float] = Query(None, gt=0),
    max_weight: Optional[float] = Query(None, gt=0),
    min_height: Optional[float] = Query(None, gt=0),
    max_height: Optional[float] = Query(None, gt=0),
    min_length: Optional[float] = Query(None, gt=0),
    max_length: Optional[float] = Query(None, gt=0),
    window: PageWindow = Depends(get_page_window),
    _: Account = Depends(require_user),
    search: SearchFacade = Depends(get_search_facade),
):
    """Filter animals; all filters optional and combined with AND, ordered by id."""
    criteria = AnimalSearchCriteria(
        animal_type_id=animal_type_id,
        min_weight=min_weight,
        max_weight=max_weight,
        min_height=min_height,
        max_height=max_height,
        min_length=min_length,
        max_length=max_length,
        gender=gender,
        life_status=life_status,
        start_date_time=start_date_time,
        end_date_time=end_date_time,
        chipper_id=chipper_id,
        chipping_location_id=chipping_location_id,
    )
    animals = await search.search_animals(criteria, window)
    visit_ids = await search.visit_ids(animals)
    return [AnimalResponse.from_animal(a, visit_ids.get(a.id, [])) for a in animals]


@router.get("/{animal_id}", response_model=AnimalResponse, responses=NOT_FOUND)
async def get_animal(
    animal_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    engine: AnimalLifecycleEngine = Depends(get_lifecycle_engine),
    search: SearchFacade = Depends(get_search_facade),
):
    return await _respond(search, await engine.get(animal_id))


@router.post(
    "",
    response_model=AnimalResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def create_animal(
    request: AnimalCreateRequest,
    _: Account = Depends(require_user),
    engine: AnimalLifecycleEngine = Depends(get_lifecycle_engine),
    search: SearchFacade = Depends(get_search_facade),
):
    animal = await engine.create(
        animal_types=request.animal_types,
        weight=request.weight,
        height=request.height,
        length=request.length,
        gender=request.gender,
        chipper_id=request.chipper_id,
        chipping_location_id=request.chipping_location_id,
    )
    return await _respond(search, animal)


@router.put("/{animal_id}", response_model=AnimalResponse, responses={**NOT_FOUND, **CONFLICT})
async def update_animal(
    request: AnimalUpdateRequest,
    animal_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    engine: AnimalLifecycleEngine = Depends(get_lifecycle_engine),
    search: SearchFacade = Depends(get_search_facade),
):
    animal = await engine.update(
        animal_id,
        weight=request.weight,
        height=request.height,
        length=request.length,
        gender=request.gender,
        life_status=request.life_status,
        chipper_id=request.chipper_id,
        chipping_location_id=request.chipping_location_id,
        animal_types=request.animal_types,
        death_date_time=request.death_date_time,
    )
    return await _respond(search, animal)


@router.delete("/{animal_id}", responses={**NOT_FOUND, **CONFLICT})
async def delete_animal(
    animal_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    engine: AnimalLifecycleEngine = Depends(get_lifecycle_engine),
):
    await engine.remove(animal_id)
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/{animal_id}/types/{type_id}",
    response_model=AnimalResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def add_animal_type(
    animal_id: int = Path(gt=0),
    type_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    engine: AnimalLifecycleEngine = Depends(get_lifecycle_engine),
    search: SearchFacade = Depends(get_search_facade),
):
    return await _respond(search, await engine.add_type(animal_id, type_id))


@router.put(
    "/{animal_id}/types",
    response_model=AnimalResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def swap_animal_type(
    request: AnimalTypeSwapRequest,
    animal_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    engine: AnimalLifecycleEngine = Depends(get_lifecycle_engine),
    search: SearchFacade = Depends(get_search_facade),
):
    animal = await engine.update_type(animal_id, request.old_type_id, request.new_type_id)
    return await _respond(search, animal)


@router.delete(
    "/{animal_id}/types/{type_id}",
    response_model=AnimalResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def remove_animal_type(
    animal_id: int = Path(gt=0),
    type_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    engine: AnimalLifecycleEngine = Depends(get_lifecycle_engine),
    search: SearchFacade = Depends(get_search_facade),
):
    return await _respond(search, await engine.remove_type(animal_id, type_id))
