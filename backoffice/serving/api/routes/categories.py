"""
Categories API Endpoints
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from backoffice.container import Backoffice
from backoffice.serving.api.dependencies import get_backoffice, get_owner_id
from backoffice.storage.models import Category, Product

router = APIRouter()


@router.get("", response_model=List[Category])
def list_categories(
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[Category]:
    return backoffice.catalog.list_categories(owner_id)


@router.get("/{category_id}", response_model=Category)
def get_category(
    category_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> Category:
    category = backoffice.catalog.get_category(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.post("", response_model=Category, status_code=201)
def create_category(
    payload: Dict[str, Any] = Body(...),
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Category:
    return backoffice.catalog.create_category(owner_id, payload)


@router.patch("/{category_id}", response_model=Category)
def update_category(
    category_id: int,
    payload: Dict[str, Any] = Body(...),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Category:
    category = backoffice.catalog.update_category(category_id, payload)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> Response:
    """Delete a category; its products keep their (now dangling) category_id"""
    if not backoffice.catalog.delete_category(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return Response(status_code=204)


@router.get("/{category_id}/products", response_model=List[Product])
def get_category_products(
    category_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[Product]:
    return backoffice.catalog.get_products_by_category(category_id)
