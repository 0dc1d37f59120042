"""Scan record, processing state and stored scan result."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .parser_output import ParserCounts
from .score_breakdown import ScoreBreakdown
from .validated_counts import Rejection


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ScanState(str, Enum):
    """Processing states for each URL. All state transitions controlled by the scan agent."""

    DISCOVERED = "DISCOVERED"
    RENDERED = "RENDERED"
    PARSED = "PARSED"
    VALIDATED = "VALIDATED"
    SCORED = "SCORED"
    STORED = "STORED"  # terminal
    FAILED = "FAILED"  # terminal


# Terminal states - no further transitions
TERMINAL_STATES = {ScanState.STORED, ScanState.FAILED}


class ScanRecord(BaseModel):
    """Record for one URL queued for scanning."""

    url: str = Field(..., description="URL as requested")
    discovered_at: datetime = Field(default_factory=_utc_now)
    state: ScanState = Field(default=ScanState.DISCOVERED)
    final_url: Optional[str] = None
    http_status: Optional[int] = None
    error: Optional[str] = None

    def advance(self, state: ScanState, **changes) -> "ScanRecord":
        if self.state in TERMINAL_STATES:
            raise ValueError(f"{self.url} is already {self.state.value}")
        return self.model_copy(update={"state": state, **changes})


class StoredScan(BaseModel):
    """Scan result for storage - includes all required fields."""

    url: str
    final_url: str
    http_status: Optional[int] = None
    success: bool
    error: Optional[str] = None
    fetch_mode: str = Field(default="render", pattern="^(http|render)$")
    score: Optional[ScoreBreakdown] = None
    validation_fallback: bool = True
    validation_fallback_reason: Optional[str] = None
    rejections: dict[str, list[Rejection]] = Field(default_factory=dict)
    counts: ParserCounts = Field(default_factory=ParserCounts)
    model_version: str = ""
    scanned_at: datetime = Field(default_factory=_utc_now)
    content_hash: Optional[str] = None

    @property
    def total(self) -> Optional[int]:
        return self.score.total if self.score else None

    @property
    def quality(self) -> Optional[str]:
        return self.score.quality if self.score else None
