"""Visited-location endpoints nested under an animal."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from ..auth.dependencies import require_user
from ..core.search import SearchFacade
from ..core.visit_sequencer import VisitSequencer
from ..db.models import Account
from ..domain.criteria import PageWindow, VisitSearchCriteria
from .dependencies import get_page_window, get_search_facade, get_visit_sequencer
from .schemas import ProblemDetails, VisitResponse, VisitUpdateRequest

router = APIRouter(prefix="/animals/{animal_id}/locations", tags=["visited-locations"])

NOT_FOUND = {404: {"model": ProblemDetails, "description": "Animal, point or visit not found"}}
CONFLICT = {409: {"model": ProblemDetails, "description": "Visit would break the ordering rules"}}


@router.get("", response_model=List[VisitResponse], responses=NOT_FOUND)
async def list_visits(
    animal_id: int = Path(gt=0),
    start_date_time: Optional[datetime] = Query(None),
    end_date_time: Optional[datetime] = Query(None),
    location_point_id: Optional[int] = Query(None, gt=0),
    window: PageWindow = Depends(get_page_window),
    _: Account = Depends(require_user),
    search: SearchFacade = Depends(get_search_facade),
):
    """Chronological visit history, filtered by point and inclusive time range."""
    criteria = VisitSearchCriteria(
        location_point_id=location_point_id,
        start_date_time=start_date_time,
        end_date_time=end_date_time,
    )
    listing = await search.list_visits(animal_id, criteria, window)
    return [VisitResponse.model_validate(visit) for visit in listing]


@router.post(
    "/{point_id}",
    response_model=VisitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def add_visit(
    animal_id: int = Path(gt=0),
    point_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    sequencer: VisitSequencer = Depends(get_visit_sequencer),
):
    return VisitResponse.model_validate(await sequencer.add(animal_id, point_id))


@router.put("", response_model=VisitResponse, responses={**NOT_FOUND, **CONFLICT})
async def update_visit(
    request: VisitUpdateRequest,
    animal_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    sequencer: VisitSequencer = Depends(get_visit_sequencer),
):
    visit = await sequencer.update(
        animal_id,
        request.visited_location_point_id,
        request.location_point_id,
        request.visited_at,
    )
    return VisitResponse.model_validate(visit)


@router.delete("/{visit_id}", responses=NOT_FOUND)
async def delete_visit(
    animal_id: int = Path(gt=0),
    visit_id: int = Path(gt=0),
    _: Account = Depends(require_user),
    sequencer: VisitSequencer = Depends(get_visit_sequencer),
):
    await sequencer.remove(animal_id, visit_id)
    return Response(status_code=status.HTTP_200_OK)
