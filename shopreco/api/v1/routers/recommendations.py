# api/v1/routers/recommendations.py
import logging
import time
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from shopreco.api.deps import ContainerDep, UserIdDep
from shopreco.domain.services.constants import RECO_RECOMMENDED

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.get("")
async def list_recommendations(
    container: ContainerDep,
    user_id: UserIdDep,
    kind: str = Query(RECO_RECOMMENDED, alias="type"),
    product_id: Optional[str] = Query(None, alias="productId"),
    recently_viewed: Optional[str] = Query(None, alias="recentlyViewed", description="Comma separated product ids"),
    limit: int = Query(8, ge=1, le=50),
):
    t0 = time.perf_counter()
    ids = [i.strip() for i in recently_viewed.split(",")] if recently_viewed else None
    try:
        products = await container.recommendations.list_recommendations(
            kind, user_id=user_id, product_id=product_id, recently_viewed=ids, limit=limit
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Response: recommendations type=%s returned %s items in %.4fs", kind, len(products), time.perf_counter() - t0)
    return {"type": kind, "recommendations": products, "count": len(products)}


@router.get("/smart")
async def smart_recommendations(
    container: ContainerDep,
    user_id: UserIdDep,
    product_id: Optional[str] = Query(None, alias="productId"),
    limit: int = Query(8, ge=1, le=50),
):
    reco_type, products = await container.recommendations.smart(user_id=user_id, product_id=product_id, limit=limit)
    return {"recommendation_type": reco_type, "recommendations": products, "count": len(products)}
