"""
Data model: targets, tagged results, payloads and aggregate reports.
"""

from src.models.targets import (
    TargetKind,
    DirectoryType,
    PriorityTier,
    CompetitorURL,
    DirectoryDescriptor,
    RankingTarget,
    BusinessData,
)
from src.models.payload import ExtractionPayload, EstimateSource
from src.models.results import (
    ResultStatus,
    ExtractionResult,
    SubmissionStatus,
    Confidence,
    SubmissionResult,
    KeywordRanking,
    failed_result_for,
)
from src.models.reports import (
    AnalysisContext,
    CompetitorProfile,
    SynthesizedReport,
    StrategicInsights,
    CompetitorAnalysisReport,
    CitationGapReport,
    CitationBatchSummary,
    LocalPerformanceReport,
    BatchReport,
)

__all__ = [
    "TargetKind",
    "DirectoryType",
    "PriorityTier",
    "CompetitorURL",
    "DirectoryDescriptor",
    "RankingTarget",
    "BusinessData",
    "ExtractionPayload",
    "EstimateSource",
    "ResultStatus",
    "ExtractionResult",
    "SubmissionStatus",
    "Confidence",
    "SubmissionResult",
    "KeywordRanking",
    "failed_result_for",
    "AnalysisContext",
    "CompetitorProfile",
    "SynthesizedReport",
    "StrategicInsights",
    "CompetitorAnalysisReport",
    "CitationGapReport",
    "CitationBatchSummary",
    "LocalPerformanceReport",
    "BatchReport",
]
