"""
HACCP descriptor and value models.
Callers may hand these in as plain dicts; services coerce them with
``model_validate`` at the boundary.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class HazardType(str, Enum):
    BIOLOGICAL = "BIOLOGICAL"
    CHEMICAL = "CHEMICAL"
    PHYSICAL = "PHYSICAL"


class LimitOperator(str, Enum):
    EQUALS = "EQUALS"
    GREATER_THAN = "GREATER_THAN"
    LESS_THAN = "LESS_THAN"
    BETWEEN = "BETWEEN"
    NOT_EQUALS = "NOT_EQUALS"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class CriticalLimit(BaseModel):
    parameter: str
    unit: str = ""
    operator: LimitOperator
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    target_value: Optional[float] = None
    tolerance: Optional[float] = None


class MonitoringProcedure(BaseModel):
    what: str = ""
    how: str = ""
    frequency: str = ""
    who: str = ""
    auto_monitoring: bool = False
    sensor_id: Optional[str] = None


class CorrectiveAction(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    description: str
    trigger: str = ""
    procedure: str = ""
    responsible: str = ""
    automated: bool = False
    executed_at: Optional[datetime] = None
    executed_by: Optional[str] = None
    result: Optional[str] = None

    @property
    def executed(self) -> bool:
        return self.executed_at is not None


class VerificationProcedure(BaseModel):
    method: str = ""
    frequency: str = ""
    responsible: str = ""


class RecordKeeping(BaseModel):
    document_name: str = ""
    retention_period: int = 365  # days
    location: str = ""
    responsible: str = ""


class Measurement(BaseModel):
    """A single reading. ``within_limit`` is set by validation, not by the caller."""
    parameter: str
    value: float
    unit: str = ""
    within_limit: bool = True
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    device_id: Optional[str] = None


class Deviation(BaseModel):
    parameter: str
    expected_value: float
    actual_value: float
    difference: float
    severity: Severity
    description: str
