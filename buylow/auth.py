"""Authentication for trader endpoints."""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.database import get_session
from buylow.models import Account
from buylow.services.admin import hash_api_key

# API key header scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def get_current_account(
    api_key: str | None = Security(api_key_header),
    session: AsyncSession = Depends(get_session),
) -> Account:
    """Resolve the X-API-Key header to an account.

    Raises:
        HTTPException: 401 if the key is missing or unknown
    """
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    result = await session.execute(
        select(Account).where(Account.api_key_hash == hash_api_key(api_key))
    )
    account = result.scalar_one_or_none()

    if not account:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return account
