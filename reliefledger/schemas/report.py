# reliefledger/schemas/report.py
"""
Pydantic schemas for reporting surfaces (aggregates and the live dashboard).
"""
from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class AggregateRow(BaseModel):
     """Counts and sums for one group of payments."""

     key: Any
     count: int = 0
     total_amount: Decimal = Decimal("0")
     committed_count: int = 0
     committed_amount: Decimal = Decimal("0")
     rejected_count: int = 0


class DashboardSummary(BaseModel):
     """Live public accountability figures computed from the registry and the log."""

     total_allocated: Decimal = Field(..., description="Sum of all beneficiary allocations")
     total_spent: Decimal = Field(..., description="Sum of committed payments")
     funds_remaining: Decimal = Field(..., description="total_allocated - total_spent")
     beneficiaries_helped: int = Field(..., description="Beneficiaries with at least one committed payment")
     vendor_payments: int = Field(..., description="Number of committed payments")
     average_payment: Decimal = Field(..., description="Mean committed payment, 2 decimals")
     spending_efficiency: float = Field(..., description="total_spent / total_allocated as a percentage, 1 decimal")
     rejected_attempts: int = Field(..., description="Number of rejected payment attempts")
     rejections_by_reason: Dict[str, int] = Field(default_factory=dict)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "total_allocated": "12600000.00",
                    "total_spent": "8950000.00",
                    "funds_remaining": "3650000.00",
                    "beneficiaries_helped": 2847,
                    "vendor_payments": 1205,
                    "average_payment": "7427.39",
                    "spending_efficiency": 71.0,
                    "rejected_attempts": 12,
                    "rejections_by_reason": {"DUPLICATE_PAYMENT": 9, "INSUFFICIENT_FUNDS": 3},
               }
          }
     )
