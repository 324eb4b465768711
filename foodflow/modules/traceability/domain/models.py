"""Value models attached to traceability records."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class MaterialUsage(BaseModel):
    material_id: str
    material_name: str
    lot_number: str
    quantity: float
    unit: str
    supplier: Optional[str] = None
    receipt_date: Optional[datetime] = None


class ProductOutput(BaseModel):
    product_id: str
    product_name: str
    lot_number: str
    quantity: float
    unit: str


class EnvironmentalCondition(BaseModel):
    parameter: str
    value: float
    unit: str
    timestamp: datetime
    within_spec: bool
