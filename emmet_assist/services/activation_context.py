"""Abbreviation activation context: where, and how, Emmet applies in a document."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from emmet_assist.services.language_id import SyntaxKind, emmet_syntax_for_language, syntax_kind
from emmet_assist.settings_schema import NormalizedEmmetConfig

if TYPE_CHECKING:
    from emmet_assist.tracking.tracker import EditorSession

# Only the current line matters for the activation checks below.
_LINE_LOOKBEHIND = 512

_CSS_PROPERTY_RE = re.compile(r"([\w-]+)\s*:[^;{}]*$")


@dataclass(frozen=True)
class ActivationContext:
    syntax: str
    kind: SyntaxKind = "markup"
    inline: bool = False
    context: Any = None


class ActivationContextResolver(Protocol):
    def resolve(self, session: "EditorSession", position: int) -> ActivationContext | None:
        ...


def line_prefix_at(session: "EditorSession", position: int) -> str:
    pos = max(0, min(int(position), session.surface.document_length()))
    text = session.surface.text_in_range(max(0, pos - _LINE_LOOKBEHIND), pos)
    return text.rsplit("\n", 1)[-1]


class SyntaxActivationResolver:
    """Resolves activation contexts from the session language id.

    Markup documents are eligible anywhere outside an open tag. Stylesheet
    documents are eligible everywhere; inside a property value the property
    name is passed along as the context payload.
    """

    def __init__(self, cfg: NormalizedEmmetConfig | None = None) -> None:
        self._cfg = cfg or NormalizedEmmetConfig()

    def update_settings(self, cfg: NormalizedEmmetConfig) -> None:
        self._cfg = cfg

    def resolve(self, session: "EditorSession", position: int) -> ActivationContext | None:
        language_id = str(session.language_id or "").strip().lower()
        if language_id not in self._cfg.markup_syntaxes and language_id not in self._cfg.stylesheet_syntaxes:
            return None

        syntax = emmet_syntax_for_language(language_id)
        kind = syntax_kind(language_id, stylesheet_syntaxes=self._cfg.stylesheet_syntaxes)
        line = line_prefix_at(session, position)

        if kind == "stylesheet":
            match = _CSS_PROPERTY_RE.search(line)
            if match:
                return ActivationContext(syntax=syntax, kind=kind, inline=True, context={"name": match.group(1)})
            return ActivationContext(syntax=syntax, kind=kind)

        if line.rfind("<") > line.rfind(">"):
            return None
        return ActivationContext(syntax=syntax, kind=kind)
