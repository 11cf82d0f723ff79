"""
Tagged per-target results.

One result is produced per target by the extractor, the dispatcher or the
orchestrator (for errors that escaped them). Results are frozen.
"""

from enum import Enum
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from src.core.exceptions import FailureReason
from src.models.payload import ExtractionPayload, EstimateSource
from src.models.targets import CompetitorURL, DirectoryDescriptor, RankingTarget


class ResultStatus(str, Enum):
    OK = "ok"
    FALLBACK = "fallback"
    FAILED = "failed"


class ExtractionResult(BaseModel):
    """
    Outcome of extracting one competitor page.

    `payload` is always present: live data for OK, synthetic data for
    FALLBACK and the zeroed shape for FAILED.
    """
    target: CompetitorURL
    status: ResultStatus
    payload: ExtractionPayload = Field(default_factory=ExtractionPayload)
    failure: Optional[FailureReason] = None
    error_message: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def ok(cls, target: CompetitorURL, payload: ExtractionPayload) -> "ExtractionResult":
        return cls(target=target, status=ResultStatus.OK, payload=payload)

    @classmethod
    def fallback(cls, target: CompetitorURL, payload: ExtractionPayload) -> "ExtractionResult":
        return cls(target=target, status=ResultStatus.FALLBACK, payload=payload)

    @classmethod
    def failed(
        cls,
        target: CompetitorURL,
        reason: FailureReason,
        message: str = "",
        payload: Optional[ExtractionPayload] = None,
    ) -> "ExtractionResult":
        return cls(
            target=target,
            status=ResultStatus.FAILED,
            payload=payload or ExtractionPayload(url=target.url),
            failure=reason,
            error_message=message or reason.value,
        )

    @property
    def is_failed(self) -> bool:
        return self.status == ResultStatus.FAILED

    def with_payload(self, payload: ExtractionPayload) -> "ExtractionResult":
        """Copy with a replaced payload (used to attach off-page estimates)."""
        return self.model_copy(update={"payload": payload})


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    FAILED = "failed"


class Confidence(str, Enum):
    HIGH = "high"
    LOW = "low"


class SubmissionResult(BaseModel):
    """
    Outcome of one directory submission.

    A submission that ran to completion but filled zero fields is still
    SUBMITTED, with LOW confidence.
    """
    directory: DirectoryDescriptor
    status: SubmissionStatus
    confidence: Optional[Confidence] = None
    entry_url: str = ""
    fields_filled: List[str] = Field(default_factory=list)
    missing_fields: List[str] = Field(default_factory=list)
    submit_clicked: bool = False
    failure: Optional[FailureReason] = None
    error_message: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def submitted(
        cls,
        directory: DirectoryDescriptor,
        fields_filled: List[str],
        missing_fields: List[str],
        submit_clicked: bool,
        entry_url: str = "",
    ) -> "SubmissionResult":
        confidence = Confidence.HIGH if fields_filled else Confidence.LOW
        return cls(
            directory=directory,
            status=SubmissionStatus.SUBMITTED,
            confidence=confidence,
            entry_url=entry_url,
            fields_filled=list(fields_filled),
            missing_fields=list(missing_fields),
            submit_clicked=submit_clicked,
        )

    @classmethod
    def failed(
        cls,
        directory: DirectoryDescriptor,
        reason: FailureReason,
        message: str = "",
        entry_url: str = "",
    ) -> "SubmissionResult":
        return cls(
            directory=directory,
            status=SubmissionStatus.FAILED,
            entry_url=entry_url,
            failure=reason,
            error_message=message or reason.value,
        )

    @property
    def directory_name(self) -> str:
        return self.directory.name

    @property
    def is_submitted(self) -> bool:
        return self.status == SubmissionStatus.SUBMITTED

    @property
    def is_failed(self) -> bool:
        return self.status == SubmissionStatus.FAILED


class KeywordRanking(BaseModel):
    """Local ranking of one business for one keyword. -1 means not found."""
    keyword: str
    search_query: str = ""
    ranking: int = -1
    organic_ranking: int = -1
    local_pack: bool = False
    featured_snippet: bool = False
    source: EstimateSource = EstimateSource.FALLBACK
    failure: Optional[FailureReason] = None
    error_message: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def unranked(cls, target: RankingTarget, reason: Optional[FailureReason] = None, message: str = "") -> "KeywordRanking":
        return cls(
            keyword=target.keyword,
            search_query=target.search_query,
            failure=reason,
            error_message=message or None,
        )

    @property
    def is_ranked(self) -> bool:
        return self.ranking > 0

    @property
    def is_failed(self) -> bool:
        return self.failure is not None


Target = Union[CompetitorURL, DirectoryDescriptor, RankingTarget]
TaggedResult = Union[ExtractionResult, SubmissionResult, KeywordRanking]


def failed_result_for(target: Target, reason: FailureReason, message: str = "") -> TaggedResult:
    """
    Build the failed result of the right kind for a target.

    Used by the orchestrator for errors that escaped an item function and for
    items skipped by cancellation.
    """
    if isinstance(target, DirectoryDescriptor):
        return SubmissionResult.failed(target, reason, message)
    if isinstance(target, RankingTarget):
        return KeywordRanking.unranked(target, reason, message or reason.value)
    if isinstance(target, CompetitorURL):
        return ExtractionResult.failed(target, reason, message)
    raise TypeError(f"Unsupported target type: {type(target).__name__}")
