from .errors import (
    InvalidAnalysisTypeError,
    TwelveLabsApiError,
    TwelveLabsConfigError,
    TwelveLabsError,
)
from .client import TwelveLabsClient
from .analysis import ANALYSIS_TYPES, run_analysis
from .catalog import (
    categorize_video,
    describe_index,
    describe_video,
    list_catalog_videos,
    list_index_summaries,
)
from .keywords import KeywordReport, extract_keywords, summary_keywords, top_terms


__all__ = [
    "InvalidAnalysisTypeError",
    "TwelveLabsApiError",
    "TwelveLabsConfigError",
    "TwelveLabsError",
    "TwelveLabsClient",
    "ANALYSIS_TYPES",
    "run_analysis",
    "categorize_video",
    "describe_index",
    "describe_video",
    "list_catalog_videos",
    "list_index_summaries",
    "KeywordReport",
    "extract_keywords",
    "summary_keywords",
    "top_terms",
]
