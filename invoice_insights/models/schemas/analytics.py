"""Analytics-related schemas.

Every model here is derived from a snapshot on each request and never stored.
"""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field


class DataSummary(BaseModel):
    """Headline totals over the whole snapshot."""
    total_invoices: int
    total_clients: int  # Active clients only
    total_items: int
    total_revenue: float  # Paid invoices only
    unpaid_amount: float
    average_invoice_value: float


class ClientAggregate(BaseModel):
    """Per-client purchase rollup."""
    client_id: str
    name: str
    total_invoices: int = 0
    total_spent: float = 0.0
    paid_invoices: int = 0
    unpaid_invoices: int = 0
    overdue_invoices: int = 0
    recent_invoices: int = 0  # Issued within the trailing recent window
    recent_spent: float = 0.0
    items: list[str] = Field(default_factory=list)  # Distinct item names, sorted
    last_purchase_date: dt.datetime | None = None
    max_payment_delay_days: int = 0
    average_invoice_value: float = 0.0


class ItemAggregate(BaseModel):
    """Per-item sales rollup. Unsold catalogue items appear with zero totals."""
    item_id: str
    name: str
    unit_price: float
    current_stock: int
    status: str | None = None
    total_units_sold: int = 0  # One unit per invoice line
    total_revenue: float = 0.0  # Priced at the current catalogue unit price
    invoice_count: int = 0
    average_quantity: float = 0.0
    last_sold_date: dt.datetime | None = None


class ChurnMetrics(BaseModel):
    recent_volume: float
    older_volume: float
    volume_change: float  # Percentage, 0 when no older volume
    recent_count: int
    older_count: int
    frequency_change: float  # Percentage, 0 when no older invoices
    max_payment_delay: int
    average_payment_delay: float
    overdue_invoices_count: int
    last_purchase_date: dt.datetime | None = None


class ChurnRiskResult(BaseModel):
    client_id: str
    client_name: str
    risk_score: int = Field(ge=0, le=100)
    risk_factors: list[str] = Field(default_factory=list)
    metrics: ChurnMetrics


class PatternMetrics(BaseModel):
    volume_change: float
    frequency_change: float
    recent_total: float
    older_total: float
    recent_count: int
    older_count: int
    recent_items: list[str] = Field(default_factory=list)
    older_items: list[str] = Field(default_factory=list)


class PatternChange(BaseModel):
    client_id: str
    client_name: str
    changes: list[str]
    metrics: PatternMetrics


class Recommendation(BaseModel):
    item_id: str
    score: float
    reasons: list[str] = Field(default_factory=list)
    name: str
    unit_price: float
    status: str


class ChurnRiskSummary(BaseModel):
    total_clients: int
    high_risk_count: int
    average_risk_score: float


class ChurnRiskAnalysis(BaseModel):
    high_risk_clients: list[ChurnRiskResult]
    summary: ChurnRiskSummary


class PatternChangeSummary(BaseModel):
    total_clients: int
    clients_with_changes: int
    change_percentage: float


class PatternChangeAnalysis(BaseModel):
    timeframe: str
    changes: dict[str, PatternChange]
    summary: PatternChangeSummary


class ClientRecommendations(BaseModel):
    client_id: str
    recommendations: list[Recommendation]
    total_recommendations: int


class DataSummaryOut(BaseModel):
    summary: DataSummary
    client_count: int
    item_count: int
    churn_risk_count: int
