"""
Article citation analyzer - the analysis pipeline.

Scrape an article, derive probe questions, ask a web-search answer engine,
and measure whether the article shows up in its sources and citations.

Modules:
- fetcher / extractor: HTTP fetch and main-text extraction
- generator: FAQ-style probe generation
- prober: answer engine probing (plus the tier-1 control probe)
- citations: URL normalization and target matching
- metrics: tier aggregation
- orchestrator: the per-submission state machine
"""

from .errors import AnalysisError, ErrorKind, SubmissionNotFound
from .retry import RetryPolicy
from .extractor import ExtractedArticle, extract
from .fetcher import Fetcher
from .engine import AnswerEngine, SearchResponse
from .generator import ProbeGenerator, GenerationResult, fallback_probes
from .prober import AnswerProber
from .citations import normalize_url, urls_match, is_target_in_citations, is_target_in_sources
from .metrics import aggregate
from .url_validator import validate_url
from .orchestrator import JobOrchestrator, build_orchestrator

__all__ = [
    "AnalysisError",
    "ErrorKind",
    "SubmissionNotFound",
    "RetryPolicy",
    "ExtractedArticle",
    "extract",
    "Fetcher",
    "AnswerEngine",
    "SearchResponse",
    "ProbeGenerator",
    "GenerationResult",
    "fallback_probes",
    "AnswerProber",
    "normalize_url",
    "urls_match",
    "is_target_in_citations",
    "is_target_in_sources",
    "aggregate",
    "validate_url",
    "JobOrchestrator",
    "build_orchestrator",
]
