"""Catalog routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from grama_common.errors import NotFound
from grama_common.models import Product, ProductCategory

from ..database import ProductDatabase
from ..models.product import ProductSearchResponse
from .deps import get_product_db

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductSearchResponse)
async def search_products(
    query: Optional[str] = Query(None, description="Search query"),
    category: Optional[ProductCategory] = Query(None, description="Filter by category"),
    in_stock_only: bool = Query(True, description="Only show in-stock items"),
    limit: int = Query(20, ge=1, le=100, description="Max results"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    product_db: ProductDatabase = Depends(get_product_db),
):
    """Search products in the catalog"""
    products, total = product_db.search_products(
        query=query,
        category=category,
        in_stock_only=in_stock_only,
        limit=limit,
        offset=offset,
    )

    return ProductSearchResponse(
        products=products,
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/categories", response_model=list[str])
async def list_categories():
    """List all product categories"""
    return [c.value for c in ProductCategory]


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    product_db: ProductDatabase = Depends(get_product_db),
):
    """Get a product by ID"""
    product = product_db.get_product(product_id)
    if not product:
        raise NotFound("Product not found")
    return product
