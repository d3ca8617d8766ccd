# api/v1/routers/cache.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from shopreco.api.deps import ContainerDep, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cache"], dependencies=[Depends(require_admin)])


@router.post("/cache/clear")
async def clear_cache(
    container: ContainerDep,
    pattern: str = Query("*", min_length=1, description="Glob pattern, e.g. products:*"),
):
    try:
        cleared = await container.cache.invalidate(pattern)
    except Exception as e:
        logger.error("cache clear failed pattern=%s err=%s", pattern, e)
        raise HTTPException(status_code=500, detail="Failed to clear cache")
    return {"message": f"Cache cleared with pattern: {pattern}", "cleared_count": cleared}
