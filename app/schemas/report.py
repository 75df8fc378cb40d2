"""
Pydantic models for reports, analyses, counters and cache invalidation.
"""

from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Classification = Literal["physical", "digital"]
CLASSIFICATIONS: tuple[Classification, ...] = ("physical", "digital")


class Report(BaseModel):
    """A single report as returned by the upstream API."""

    model_config = ConfigDict(extra="allow", frozen=True)

    seq: int = Field(..., description="Unique sequence number of the report.")
    timestamp: Optional[datetime] = None
    id: Optional[str] = Field(None, description="Reporter identifier.")
    team: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image: Optional[Union[str, list[int]]] = Field(
        None, description="Image bytes or a reference to them."
    )
    action_id: Optional[str] = None
    classification: Optional[Classification] = None


class ReportAnalysis(BaseModel):
    """Language-specific analysis attached to a report."""

    model_config = ConfigDict(extra="allow", frozen=True)

    seq: Optional[int] = None
    language: str = Field("en", description="Language the analysis was produced in.")
    classification: Optional[Classification] = None
    severity_level: Optional[float] = None
    brand_name: Optional[str] = None
    brand_display_name: Optional[str] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    source: Optional[str] = None


class ReportWithAnalysis(BaseModel):
    """A report together with the analyses the pipeline produced for it."""

    model_config = ConfigDict(frozen=True)

    report: Report
    analysis: list[ReportAnalysis] = Field(default_factory=list)

    @field_validator("analysis")
    @classmethod
    def _one_analysis_per_language(
        cls, value: list[ReportAnalysis]
    ) -> list[ReportAnalysis]:
        """Keep the first analysis per language; later duplicates are dropped."""
        seen: set[str] = set()
        unique: list[ReportAnalysis] = []
        for item in value:
            language = item.language.lower()
            if language in seen:
                continue
            seen.add(language)
            unique.append(item)
        return unique

    @property
    def seq(self) -> int:
        return self.report.seq


class ReportsResponse(BaseModel):
    """Envelope of the upstream `reports/last` endpoint."""

    reports: list[ReportWithAnalysis] = Field(default_factory=list)

    @field_validator("reports", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


class ReportCounts(BaseModel):
    """Totals published by the upstream report counter."""

    model_config = ConfigDict(extra="allow")

    total_reports: int = 0
    total_physical_reports: int = 0
    total_digital_reports: int = 0


class InvalidateCacheRequest(BaseModel):
    """Either a single sequence number or a list of them, never both."""

    seq: Optional[int] = Field(None, description="Sequence number to invalidate.")
    seqs: Optional[list[int]] = Field(
        None, description="Sequence numbers to invalidate in one call."
    )

    @model_validator(mode="after")
    def _exactly_one(self) -> "InvalidateCacheRequest":
        if (self.seq is None) == (self.seqs is None):
            raise ValueError("Provide exactly one of 'seq' or 'seqs'.")
        return self


class InvalidateCacheResponse(BaseModel):
    """Outcome of a cache invalidation call."""

    success: bool = True
    message: str
    invalidated: int = Field(..., description="Number of cache entries removed.")


__all__ = [
    "CLASSIFICATIONS",
    "Classification",
    "InvalidateCacheRequest",
    "InvalidateCacheResponse",
    "Report",
    "ReportAnalysis",
    "ReportCounts",
    "ReportWithAnalysis",
    "ReportsResponse",
]
