"""
Products API Endpoints

Product CRUD and the product <-> tag association.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from pydantic import BaseModel

from backoffice.container import Backoffice
from backoffice.serving.api.dependencies import get_backoffice, get_owner_id
from backoffice.storage.models import Discount, Product, ProductTag, Tag

router = APIRouter()


class TagLink(BaseModel):
    """Tag to attach to a product"""
    tag_id: int


@router.get("", response_model=List[Product])
def list_products(
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[Product]:
    return backoffice.catalog.list_products(owner_id)


@router.get("/{product_id}", response_model=Product)
def get_product(
    product_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> Product:
    product = backoffice.catalog.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=Product, status_code=201)
def create_product(
    payload: Dict[str, Any] = Body(...),
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Product:
    return backoffice.catalog.create_product(owner_id, payload)


@router.patch("/{product_id}", response_model=Product)
def update_product(
    product_id: int,
    payload: Dict[str, Any] = Body(...),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Product:
    product = backoffice.catalog.update_product(product_id, payload)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> Response:
    if not backoffice.catalog.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=204)


@router.get("/{product_id}/tags", response_model=List[Tag])
def get_product_tags(
    product_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[Tag]:
    return backoffice.catalog.get_product_tags(product_id)


@router.post("/{product_id}/tags", response_model=ProductTag, status_code=201)
def add_tag_to_product(
    product_id: int,
    link: TagLink,
    backoffice: Backoffice = Depends(get_backoffice),
) -> ProductTag:
    return backoffice.catalog.add_tag_to_product(product_id, link.tag_id)


@router.delete("/{product_id}/tags/{tag_id}", status_code=204)
def remove_tag_from_product(
    product_id: int,
    tag_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> Response:
    if not backoffice.catalog.remove_tag_from_product(product_id, tag_id):
        raise HTTPException(status_code=404, detail="Product tag not found")
    return Response(status_code=204)


@router.get("/{product_id}/discounts", response_model=List[Discount])
def get_product_discounts(
    product_id: int,
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[Discount]:
    """Active discounts whose scope targets the product"""
    return backoffice.discounts.discounts_for_product(owner_id, product_id, backoffice.now())
