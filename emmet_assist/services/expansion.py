"""Expansion engine contracts and configuration builders.

The engine itself is pluggable: anything implementing ``ExpansionEngine`` can
expand abbreviations and locate them in a document. This module only shapes
the configuration handed to it and turns its failures into plain results.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Protocol

from emmet_assist.services.activation_context import ActivationContext
from emmet_assist.services.language_id import SyntaxKind
from emmet_assist.settings_schema import NormalizedEmmetConfig

if TYPE_CHECKING:
    from emmet_assist.tracking.tracker import EditorSession

FieldRenderer = Callable[[int, str], str]

PREVIEW_INDENT = "  "


class ExpansionError(ValueError):
    """Raised by an engine when the abbreviation cannot be expanded."""


def snippet_field(index: int, placeholder: str) -> str:
    if placeholder:
        return f"${{{index}:{placeholder}}}"
    return f"${{{index}}}"


def preview_field(index: int, placeholder: str) -> str:
    return placeholder


@dataclass(frozen=True)
class OutputOptions:
    indent: str = "\t"
    base_indent: str = ""
    field: FieldRenderer = snippet_field
    format: bool = True

    def to_mapping(self) -> dict[str, Any]:
        return {
            "output.indent": self.indent,
            "output.baseIndent": self.base_indent,
            "output.field": self.field,
            "output.format": self.format,
        }


@dataclass(frozen=True)
class ExpandConfig:
    type: SyntaxKind
    syntax: str
    context: Any = None
    options: OutputOptions = OutputOptions()


@dataclass(frozen=True)
class AbbreviationBounds:
    start: int
    end: int


@dataclass(slots=True)
class ExpansionResult:
    ok: bool
    text: str = ""
    error: str = ""


class ExpansionEngine(Protocol):
    def expand(self, abbreviation: str, config: ExpandConfig) -> str:
        ...

    def extract(
        self,
        session: "EditorSession",
        position: int,
        config: ExpandConfig,
    ) -> AbbreviationBounds | None:
        ...


def get_output_options(
    cfg: NormalizedEmmetConfig,
    *,
    inline: bool,
    indent_unit: str | None = None,
) -> OutputOptions:
    indent = indent_unit if isinstance(indent_unit, str) and indent_unit else cfg.indent
    return OutputOptions(indent=indent, base_indent="", field=snippet_field, format=not inline)


def build_config(context: ActivationContext, options: OutputOptions) -> ExpandConfig:
    return ExpandConfig(
        type=context.kind,
        syntax=context.syntax,
        context=context.context,
        options=options,
    )


def build_preview_config(config: ExpandConfig) -> ExpandConfig:
    """Config for human-readable documentation: literal placeholders, fixed indent."""
    options = replace(config.options, field=preview_field, indent=PREVIEW_INDENT, base_indent="")
    return replace(config, options=options)


def expand_safely(engine: ExpansionEngine, abbreviation: str, config: ExpandConfig) -> ExpansionResult:
    if not abbreviation:
        return ExpansionResult(ok=False, error="empty abbreviation")
    try:
        text = engine.expand(abbreviation, config)
    except ExpansionError as exc:
        return ExpansionResult(ok=False, error=str(exc) or "invalid abbreviation")
    return ExpansionResult(ok=True, text=str(text or ""))
