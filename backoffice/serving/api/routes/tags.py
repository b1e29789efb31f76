"""
Tags API Endpoints
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from backoffice.container import Backoffice
from backoffice.serving.api.dependencies import get_backoffice, get_owner_id
from backoffice.storage.models import Product, Tag

router = APIRouter()


@router.get("", response_model=List[Tag])
def list_tags(
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[Tag]:
    return backoffice.catalog.list_tags(owner_id)


@router.post("", response_model=Tag, status_code=201)
def create_tag(
    payload: Dict[str, Any] = Body(...),
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Tag:
    return backoffice.catalog.create_tag(owner_id, payload)


@router.delete("/{tag_id}", status_code=204)
def delete_tag(
    tag_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> Response:
    if not backoffice.catalog.delete_tag(tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")
    return Response(status_code=204)


@router.get("/{tag_id}/products", response_model=List[Product])
def get_tag_products(
    tag_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[Product]:
    return backoffice.catalog.get_products_by_tag(tag_id)
