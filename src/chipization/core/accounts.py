"""Account directory: registration, lookup and credential checks."""

from typing import List, Optional

from ..auth.security import hash_password
from ..db.models import Account
from ..domain.criteria import PageWindow
from .enums import Role
from .errors import ConflictError, NotFoundError, ValidationFailure
from .service import CoreService


class AccountDirectory(CoreService):
    """Operators that chip animals and call the API."""

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        role: Role = Role.USER,
    ) -> Account:
        async with self.transaction():
            fields = {
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "password": password,
            }
            blank = [name for name, value in fields.items() if not value or not value.strip()]
            if blank:
                raise self.reject(
                    ValidationFailure,
                    "account.register",
                    f"fields must not be blank: {', '.join(blank)}",
                    email=email,
                )
            if await self.repos.account.get_by_email(email) is not None:
                raise self.reject(
                    ConflictError,
                    "account.register",
                    "an account with this email already exists",
                    email=email,
                )

            salt_hex, hash_hex = hash_password(password)
            account = await self.repos.account.create(
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_salt=salt_hex,
                password_hash=hash_hex,
                role=role,
            )

        self.logger.info(f"Registered account {account.id} ({email}, role={Role(role).value})")
        return account

    async def get(self, account_id: int) -> Account:
        account = await self.repos.account.get_by_id(account_id)
        if account is None:
            raise NotFoundError(
                f"Account {account_id} not found", context={"account_id": account_id}
            )
        return account

    async def search(
        self,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        window: Optional[PageWindow] = None,
    ) -> List[Account]:
        return await self.repos.account.search(
            first_name, last_name, email, window or PageWindow()
        )

    async def authenticate(self, email: str, password: str) -> Optional[Account]:
        """Return the account for valid credentials, None otherwise."""
        account = await self.repos.account.get_by_email(email)
        if account is None or not account.verify_password(password):
            self.logger.warning(f"Failed authentication for {email}")
            return None
        return account
