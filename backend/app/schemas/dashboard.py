"""Pydantic schemas for the dashboard payload consumed by the frontend."""

from __future__ import annotations

from datetime import datetime
from typing import Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PricePointSchema(CamelModel):
    date: str = Field(..., examples=["2024-06-24"])
    value: float


class AssetDataSchema(CamelModel):
    name: str
    color: str
    data: list[PricePointSchema]
    initial_value: float
    current_value: float
    return_percent: float


class BenchmarksSchema(CamelModel):
    cdi: list[PricePointSchema] = Field(default_factory=list)
    ipca_plus5: list[PricePointSchema] = Field(default_factory=list)
    dolar_plus4: list[PricePointSchema] = Field(default_factory=list)
    poupanca: list[PricePointSchema] = Field(default_factory=list)
    ipca: list[PricePointSchema] = Field(default_factory=list)
    ifix: list[PricePointSchema] = Field(default_factory=list)


class PeriodReturnsSchema(CamelModel):
    current_month: float
    year_to_date: float
    last_3_months: float
    last_6_months: float
    last_12_months: float
    last_24_months: float
    since_inception: float


class ConsistencyStatsSchema(CamelModel):
    positive_months: int
    negative_months: int
    best_month: float
    worst_month: float


class AssetTableDataSchema(CamelModel):
    name: str
    color: str
    returns: PeriodReturnsSchema
    consistency: ConsistencyStatsSchema


class DashboardResponse(CamelModel):
    bitcoin: AssetDataSchema
    ibovespa: AssetDataSchema
    benchmarks: BenchmarksSchema
    chart_data: list[dict[str, Union[str, float]]]
    table_data: list[AssetTableDataSchema]
    last_update: datetime

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "chartData": [{"date": "2024-06-24", "bitcoin": 100000, "ibovespa": 100000}],
                "lastUpdate": "2024-06-25T12:00:00Z",
            }
        },
    )


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


__all__ = [
    "AssetDataSchema",
    "AssetTableDataSchema",
    "BenchmarksSchema",
    "ConsistencyStatsSchema",
    "DashboardResponse",
    "ErrorResponse",
    "PeriodReturnsSchema",
    "PricePointSchema",
]
