"""Authentication dependencies for FastAPI.

Callers authenticate with HTTP Basic (email + password). Role checks are
explicit guard dependencies placed in front of the routes.
"""

from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from ..core.accounts import AccountDirectory
from ..core.enums import Role
from ..db.models import Account
from ..repositories.dependencies import get_repository_container
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

# auto_error=False so anonymous calls reach the optional dependency
security = HTTPBasic(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


async def get_current_account_optional(
    credentials: Optional[HTTPBasicCredentials] = Depends(security),
    repos: RepositoryContainer = Depends(get_repository_container),
) -> Optional[Account]:
    """
    Get the authenticated account, or None for anonymous calls.

    Credentials that are present but wrong still fail with 401.
    """
    if credentials is None:
        return None

    account = await AccountDirectory(repos).authenticate(
        credentials.username, credentials.password
    )
    if account is None:
        raise _unauthorized("Invalid email or password")
    return account


async def get_current_account(
    account: Optional[Account] = Depends(get_current_account_optional),
) -> Account:
    """Get the authenticated account; anonymous calls fail with 401."""
    if account is None:
        raise _unauthorized("Authentication required")
    return account


def require_role(*roles: Role) -> Callable:
    """Build a dependency admitting only accounts holding one of ``roles``."""
    allowed = {Role(role).value for role in roles}

    async def guard(account: Account = Depends(get_current_account)) -> Account:
        if account.role not in allowed:
            logger.warning(
                f"Account {account.id} with role {account.role} denied (needs {sorted(allowed)})"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role for this operation",
            )
        return account

    return guard


# The "user" capability: held by every role
require_user = require_role(Role.ADMIN, Role.CHIPPER, Role.USER)
