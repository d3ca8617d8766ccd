# api/v1/routers/products.py
import logging
import time
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from shopreco.api.deps import ContainerDep, require_admin
from shopreco.api.v1.schemas.bundle import BundleCreateIn, BundleListOut
from shopreco.domain.models.bundle import Bundle
from shopreco.domain.models.product import Category
from shopreco.domain.services.catalog_svc import ProductComparison, ProductPage, SortField
from shopreco.domain.services.trending_svc import normalize_timeframe

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductPage)
async def list_products(
    container: ContainerDep,
    category: Optional[Category] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    search: Optional[str] = Query(None, min_length=1),
    featured: bool = Query(False),
    sort_field: SortField = Query("created_at", alias="sortField"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    return await container.catalog.list_products(
        category=category,
        min_price=min_price,
        max_price=max_price,
        search=search,
        featured=featured,
        sort_field=sort_field,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@router.get("/bundles", response_model=BundleListOut)
async def list_bundles(
    container: ContainerDep,
    product_id: Optional[str] = Query(None, alias="productId"),
    category: Optional[Category] = Query(None),
    limit: int = Query(3, ge=1, le=20),
):
    t0 = time.perf_counter()
    bundles = await container.bundles.get_bundles(product_id=product_id, category=category, limit=limit)
    logger.info("Response: list_bundles returned %s bundles in %.4fs", len(bundles), time.perf_counter() - t0)
    return {"bundles": bundles, "count": len(bundles)}


@router.post("/bundles", response_model=Bundle, status_code=201, dependencies=[Depends(require_admin)])
async def create_bundle(body: BundleCreateIn, container: ContainerDep):
    try:
        return await container.bundles.create_bundle(
            name=body.name,
            description=body.description,
            main_product_id=body.main_product_id,
            related_product_ids=body.related_product_ids,
            discount_percentage=body.discount_percentage,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/trending")
async def list_trending(
    container: ContainerDep,
    category: Optional[Category] = Query(None),
    timeframe: str = Query("week", description="day, week or month; anything else means week"),
    limit: int = Query(10, ge=1, le=50),
):
    timeframe = normalize_timeframe(timeframe)
    products = await container.trending.get_trending(category=category, timeframe=timeframe, limit=limit)
    return {"timeframe": timeframe, "products": products, "count": len(products)}


@router.get("/compare", response_model=ProductComparison)
async def compare_products(
    container: ContainerDep,
    ids: str = Query("", description="Comma separated product ids, at most 4"),
):
    try:
        return await container.catalog.compare_products(ids.split(","))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
