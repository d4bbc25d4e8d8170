"""Product API routes"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Query, Request

from ..models.product import Product
from .dependencies import get_session_manager

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=list[Product])
async def list_products(
    request: Request,
    search: Optional[str] = Query(None, description="Search query"),
    category: Optional[str] = Query(None, description="Filter by category"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(12, ge=1, le=100, description="Results per page"),
):
    """List catalog products"""
    catalog = get_session_manager(request).catalog
    return await catalog.get_products(
        page=page,
        per_page=per_page,
        category=category,
        search=search,
    )


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: int, request: Request):
    """Get a product by ID"""
    catalog = get_session_manager(request).catalog
    product = await catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
