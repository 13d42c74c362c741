"""
KeySmith Result Models
======================

The envelope every engine operation returns. A :class:`ScanResult` names
its ``target`` (a *masked* password or a source name, never a raw
secret), collects :class:`Finding` objects, and may carry an overall
:class:`Risk`. Operation-specific models are serialised into
``metadata``.

Finding severities use the CVSS v3.1 qualitative names; risk bands
follow the OWASP Risk Rating Methodology.

References:
    - OWASP Risk Rating Methodology.
      https://owasp.org/www-community/OWASP_Risk_Rating_Methodology
    - FIRST. (2019). Common Vulnerability Scoring System v3.1.
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import datetime as _dt
import json as _json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _utcnow() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc)


class Severity(str, Enum):
    """Finding severity, most severe first."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @property
    def label(self) -> str:
        return "Informational" if self is Severity.INFO else self.value.title()

    @property
    def style(self) -> str:
        """Name of the matching style in the console theme."""
        return self.value.lower()

    @property
    def rank(self) -> int:
        return list(Severity).index(self)


# Lower bound of each band on the 0-100 scale, highest first
_RISK_BANDS: tuple[tuple[float, str], ...] = (
    (90.0, "CRITICAL"),
    (70.0, "HIGH"),
    (40.0, "MEDIUM"),
    (10.0, "LOW"),
    (0.0, "NEGLIGIBLE"),
)


class RiskLevel(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    NEGLIGIBLE = "NEGLIGIBLE"

    @classmethod
    def from_score(cls, score: float) -> RiskLevel:
        for floor, name in _RISK_BANDS:
            if score >= floor:
                return cls(name)
        return cls.NEGLIGIBLE


class Finding(BaseModel):
    """One observation about a password, a generated secret or a source.

    ``evidence`` accepts dicts and lists and stores them as JSON text.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="ignore",
    )

    severity: Severity
    title: str = Field(..., min_length=1, max_length=256)
    description: str = Field(..., min_length=1)
    evidence: str = ""
    recommendation: str = ""
    references: list[str] = Field(default_factory=list)

    @field_validator("evidence", mode="before")
    @classmethod
    def _coerce_evidence(cls, v: Any) -> str:
        if isinstance(v, (dict, list)):
            return _json.dumps(v, ensure_ascii=False, default=str)
        return v if isinstance(v, str) else str(v)


class Risk(BaseModel):
    """A 0-100 score plus its band; ``level`` is derived when omitted."""

    model_config = ConfigDict(validate_assignment=True)

    score: float = Field(..., ge=0.0, le=100.0)
    level: Optional[RiskLevel] = None
    factors: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _derive_level(self) -> Risk:
        if self.level is None:
            self.level = RiskLevel.from_score(self.score)
        return self


class ScanResult(BaseModel):
    """Outcome of one engine operation.

    Attributes:
        tool_name:  Producing component, ``"keysmith"`` for the engine.
        target:     Masked password, masked pair, or ``source:<name>``.
        start_time: UTC start.
        end_time:   UTC end, set by :meth:`finalize`.
        findings:   Observations in the order they were added.
        risk:       Overall risk, when the operation scores one.
        summary:    One-line human summary.
        metadata:   Serialised operation models keyed by kind.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    tool_name: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    start_time: _dt.datetime = Field(default_factory=_utcnow)
    end_time: Optional[_dt.datetime] = None
    findings: list[Finding] = Field(default_factory=list)
    risk: Optional[Risk] = None
    summary: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def duration_seconds(self) -> float | None:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    @property
    def severity_counts(self) -> dict[str, int]:
        counts = dict.fromkeys((s.value for s in Severity), 0)
        for finding in self.findings:
            counts[finding.severity.value] += 1
        return counts

    @property
    def highest_severity(self) -> Severity | None:
        return min((f.severity for f in self.findings), key=lambda s: s.rank, default=None)

    @property
    def has_errors(self) -> bool:
        """Whether an operation failure was recorded as a finding."""
        return any(f.title.endswith("failed") for f in self.findings)

    def add_finding(self, finding: Finding) -> None:
        self.findings.append(finding)

    def finalize(self, summary: str | None = None) -> ScanResult:
        """Stamp ``end_time`` and set ``summary``, defaulting to a count line."""
        self.end_time = _utcnow()
        if summary is None:
            nonzero = [f"{sev}: {n}" for sev, n in self.severity_counts.items() if n]
            summary = (
                f"Analysis complete. Findings: {len(self.findings)} "
                f"({', '.join(nonzero) or 'none'})"
            )
        self.summary = summary
        return self
