from .provider import (
    AbbreviationCompletionProvider,
    CandidateResult,
    CompletionCandidate,
    CompletionRequest,
)
from .tracker import EditorSession, TextSurface, Tracker

__all__ = [
    "AbbreviationCompletionProvider",
    "CandidateResult",
    "CompletionCandidate",
    "CompletionRequest",
    "EditorSession",
    "TextSurface",
    "Tracker",
]
