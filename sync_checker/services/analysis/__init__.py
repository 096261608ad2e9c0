"""Межпроцедурный анализ блокирующих вызовов."""

from .config import AnalysisConfig
from .errors import AnalysisError, ParseError, ResolutionError, SourceReadError
from .lint import NoSyncInAsyncRule
from .models import AnalysisSnapshot, Diagnostic, DiagnosticKind, Fix, FunctionLocation
from .session import AnalysisSession

__all__ = [
    "AnalysisConfig",
    "AnalysisError",
    "AnalysisSession",
    "AnalysisSnapshot",
    "Diagnostic",
    "DiagnosticKind",
    "Fix",
    "FunctionLocation",
    "NoSyncInAsyncRule",
    "ParseError",
    "ResolutionError",
    "SourceReadError",
]
