from fastapi import Header, HTTPException
from typing import Optional


async def get_optional_user_id(
    x_user_id: Optional[str] = Header(None),
) -> Optional[str]:
    """
    User ID for best-effort persistence.

    Anonymous callers still get their analysis back; it just isn't stored.
    """
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return None


async def get_user_id(
    x_user_id: Optional[str] = Header(None),
) -> str:
    """
    User ID from header (required for reading stored analyses)

    Usage:
        @router.get("/endpoint")
        async def endpoint(user_id: str = Depends(get_user_id)):
            # Filter data by user_id
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=401,
            detail="User ID required. Provide X-User-ID header."
        )
    return x_user_id.strip()
