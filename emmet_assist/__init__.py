"""Emmet abbreviation tracking and completion for PySide6 code editors."""

from .services.activation_context import ActivationContext, SyntaxActivationResolver
from .services.expansion import AbbreviationBounds, ExpandConfig, ExpansionEngine, ExpansionError, OutputOptions
from .settings_schema import NormalizedEmmetConfig, default_emmet_settings
from .tracking import (
    AbbreviationCompletionProvider,
    CompletionCandidate,
    CompletionRequest,
    EditorSession,
)

__version__ = "0.1.0"

__all__ = [
    "AbbreviationBounds",
    "AbbreviationCompletionProvider",
    "ActivationContext",
    "CompletionCandidate",
    "CompletionRequest",
    "EditorSession",
    "ExpandConfig",
    "ExpansionEngine",
    "ExpansionError",
    "NormalizedEmmetConfig",
    "OutputOptions",
    "SyntaxActivationResolver",
    "default_emmet_settings",
]
