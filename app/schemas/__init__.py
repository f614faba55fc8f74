from .analysis import AnalyzeDocumentRequest, AnalyzeDocumentResponse
from .extraction import ExtractionResult

__all__ = [
    "AnalyzeDocumentRequest",
    "AnalyzeDocumentResponse",
    "ExtractionResult",
]
