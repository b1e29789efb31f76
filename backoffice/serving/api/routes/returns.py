"""
Returns API Endpoints

Return requests are listed and fetched with their order embedded.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from backoffice.container import Backoffice
from backoffice.serving.api.dependencies import get_backoffice, get_owner_id
from backoffice.storage.models import Order, Return

router = APIRouter()


class ReturnDetail(Return):
    """Return request with the order it refers to"""
    order: Optional[Order] = None


def _detail(return_request: Return, backoffice: Backoffice) -> ReturnDetail:
    return ReturnDetail(
        **return_request.model_dump(),
        order=backoffice.orders.get_order(return_request.order_id),
    )


@router.get("", response_model=List[ReturnDetail])
def list_returns(
    owner_id: int = Depends(get_owner_id),
    backoffice: Backoffice = Depends(get_backoffice),
) -> List[ReturnDetail]:
    return [_detail(r, backoffice) for r in backoffice.returns.list_returns(owner_id)]


@router.get("/{return_id}", response_model=ReturnDetail)
def get_return(
    return_id: int,
    backoffice: Backoffice = Depends(get_backoffice),
) -> ReturnDetail:
    return_request = backoffice.returns.get_return(return_id)
    if return_request is None:
        raise HTTPException(status_code=404, detail="Return not found")
    return _detail(return_request, backoffice)


@router.post("", response_model=Return, status_code=201)
def create_return(
    payload: Dict[str, Any] = Body(...),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Return:
    return backoffice.returns.create_return(payload)


@router.patch("/{return_id}", response_model=Return)
def update_return(
    return_id: int,
    payload: Dict[str, Any] = Body(...),
    backoffice: Backoffice = Depends(get_backoffice),
) -> Return:
    """Any status may be set from any other"""
    return_request = backoffice.returns.update_return(return_id, payload)
    if return_request is None:
        raise HTTPException(status_code=404, detail="Return not found")
    return return_request
