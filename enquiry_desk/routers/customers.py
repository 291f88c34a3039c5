from typing import Optional

from fastapi import APIRouter, Depends

from ..core.customers import build_customers, filter_customers
from ..dependencies import get_pipeline
from ..sales.pipeline import SalesPipeline
from ..schemas import customer_payload

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("")
async def list_customers(
    search: Optional[str] = None,
    type: Optional[str] = None,
    pipeline: SalesPipeline = Depends(get_pipeline),
):
    """Customers grouped from leads and orders; type=all|retail|bulk"""
    customers = build_customers(await pipeline.leads.list(), await pipeline.orders.list())
    total_spent = sum(customer.total_spent for customer in customers)
    shown = filter_customers(customers, search, type)
    return {
        "count": len(shown),
        "totalCustomers": len(customers),
        "frequentBuyers": sum(1 for customer in customers if customer.is_frequent_buyer),
        "totalRevenue": float(total_spent),
        "averageSpend": round(float(total_spent) / len(customers), 2) if customers else 0.0,
        "customers": [customer_payload(customer) for customer in shown],
    }
