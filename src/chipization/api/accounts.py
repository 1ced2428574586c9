"""Account registration and lookup endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth.dependencies import get_current_account_optional, require_user
from ..core.accounts import AccountDirectory
from ..db.models import Account
from ..domain.criteria import PageWindow
from .dependencies import get_account_directory, get_page_window
from .middleware import ProblemDetailsException
from .schemas import AccountResponse, ProblemDetails, RegistrationRequest

router = APIRouter(tags=["accounts"])


@router.post(
    "/registration",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ProblemDetails, "description": "Invalid registration data"},
        403: {"model": ProblemDetails, "description": "Caller is already authenticated"},
        409: {"model": ProblemDetails, "description": "Email already registered"},
    },
)
async def register_account(
    request: RegistrationRequest,
    current: Optional[Account] = Depends(get_current_account_optional),
    accounts: AccountDirectory = Depends(get_account_directory),
):
    """Register a new USER account. Only anonymous callers may register."""
    if current is not None:
        raise ProblemDetailsException(
            status_code=status.HTTP_403_FORBIDDEN,
            title="Forbidden",
            detail="Authenticated accounts cannot register",
        )
    account = await accounts.register(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        password=request.password,
    )
    return AccountResponse.model_validate(account)


@router.get(
    "/accounts/search",
    response_model=List[AccountResponse],
    responses={401: {"model": ProblemDetails, "description": "Authentication required"}},
)
async def search_accounts(
    first_name: Optional[str] = Query(None),
    last_name: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    window: PageWindow = Depends(get_page_window),
    _: Account = Depends(require_user),
    accounts: AccountDirectory = Depends(get_account_directory),
):
    """Case-insensitive substring search over names and email, ordered by id."""
    found = await accounts.search(first_name, last_name, email, window)
    return [AccountResponse.model_validate(account) for account in found]


@router.get(
    "/accounts/{account_id}",
    response_model=AccountResponse,
    responses={
        401: {"model": ProblemDetails, "description": "Authentication required"},
        404: {"model": ProblemDetails, "description": "Account not found"},
    },
)
async def get_account(
    account_id: int,
    _: Account = Depends(require_user),
    accounts: AccountDirectory = Depends(get_account_directory),
):
    return AccountResponse.model_validate(await accounts.get(account_id))
