from fastapi import APIRouter, Depends, status

from ..core.errors import RecordNotFound
from ..dependencies import get_counter
from ..sales.counter import PosCounter
from ..schemas import CartRequest, CheckoutRequest, bill_payload, cart_payload, totals_payload

router = APIRouter(prefix="/api/pos", tags=["pos"])


@router.post("/quote")
async def quote_cart(body: CartRequest, counter: PosCounter = Depends(get_counter)):
    """Cart panel totals: what the customer pays, MRP, and the saving against MRP"""
    items, totals = counter.quote([item.model_dump(by_alias=True) for item in body.items])
    return {"items": cart_payload(items), **totals_payload(totals)}


@router.post("/checkout", status_code=status.HTTP_201_CREATED)
async def checkout(body: CheckoutRequest, counter: PosCounter = Depends(get_counter)):
    bill = await counter.checkout(
        [item.model_dump(by_alias=True) for item in body.items],
        body.customer_name,
        body.payment_method,
        str(body.customer_phone) if body.customer_phone is not None else None,
    )
    return bill_payload(bill)


@router.get("/bills")
async def list_bills(counter: PosCounter = Depends(get_counter)):
    bills = counter.list_bills()
    return {
        "count": len(bills),
        "bills": [bill_payload(bill) for bill in bills],
    }


@router.get("/bills/{bill_id}")
async def get_bill(bill_id: str, counter: PosCounter = Depends(get_counter)):
    bill = counter.get_bill(bill_id)
    if bill is None:
        raise RecordNotFound(f"Bill {bill_id} not found")
    return bill_payload(bill)
