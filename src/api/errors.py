"""HTTPException shortcuts shared by the routers."""

from typing import Any, Optional

from fastapi import HTTPException


async def get_or_404(repo, obj_id: int, label: str) -> Any:
    """Fetch a row addressed by the URL path or fail with 404."""
    obj = await repo.get_by_id(obj_id)
    if obj is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return obj


async def ensure_exists(repo, obj_id: Optional[int], label: str) -> None:
    """Reject a body that references a row which does not exist (400)."""
    if obj_id is not None and not await repo.exists(obj_id):
        raise HTTPException(
            status_code=400, detail=f"{label} with id {obj_id} does not exist"
        )


def conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=409, detail=detail)
