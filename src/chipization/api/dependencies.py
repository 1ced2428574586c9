"""FastAPI dependencies wiring the core services to a request."""

from typing import Optional

from fastapi import Depends, Query

from ..config import get_config
from ..core.accounts import AccountDirectory
from ..core.clock import Clock, get_clock
from ..core.errors import ValidationFailure
from ..core.lifecycle_engine import AnimalLifecycleEngine
from ..core.location_points import LocationPointStore
from ..core.search import SearchFacade
from ..core.type_registry import TypeRegistry
from ..core.visit_sequencer import VisitSequencer
from ..domain.criteria import PageWindow
from ..repositories.dependencies import get_repository_container
from ..repositories.interfaces import RepositoryContainer


def get_page_window(
    page: int = Query(0, ge=0, description="Page index, starting at 0"),
    size: Optional[int] = Query(None, gt=0, description="Page size"),
) -> PageWindow:
    config = get_config()
    size = size or config.app.default_page_size
    if size > config.app.max_page_size:
        raise ValidationFailure(
            f"size must not exceed {config.app.max_page_size}", context={"size": size}
        )
    return PageWindow(page=page, size=size)


def get_account_directory(
    repos: RepositoryContainer = Depends(get_repository_container),
    clock: Clock = Depends(get_clock),
) -> AccountDirectory:
    return AccountDirectory(repos, clock)


def get_type_registry(
    repos: RepositoryContainer = Depends(get_repository_container),
    clock: Clock = Depends(get_clock),
) -> TypeRegistry:
    return TypeRegistry(repos, clock)


def get_location_store(
    repos: RepositoryContainer = Depends(get_repository_container),
    clock: Clock = Depends(get_clock),
) -> LocationPointStore:
    return LocationPointStore(repos, clock)


def get_lifecycle_engine(
    repos: RepositoryContainer = Depends(get_repository_container),
    clock: Clock = Depends(get_clock),
) -> AnimalLifecycleEngine:
    return AnimalLifecycleEngine(repos, clock)


def get_visit_sequencer(
    repos: RepositoryContainer = Depends(get_repository_container),
    clock: Clock = Depends(get_clock),
) -> VisitSequencer:
    return VisitSequencer(repos, clock)


def get_search_facade(
    repos: RepositoryContainer = Depends(get_repository_container),
    clock: Clock = Depends(get_clock),
) -> SearchFacade:
    return SearchFacade(repos, clock)
