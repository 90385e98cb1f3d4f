"""Emmet abbreviation completion provider.

Decides on every completion request whether an abbreviation is being typed,
keeps at most one tracker per editor session and turns the tracked text into
a single expand-abbreviation completion.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Literal

from emmet_assist.services.activation_context import ActivationContextResolver, SyntaxActivationResolver
from emmet_assist.services.expansion import (
    ExpansionEngine,
    ExpansionError,
    OutputOptions,
    build_config,
    build_preview_config,
    expand_safely,
    get_output_options,
)
from emmet_assist.settings_schema import NormalizedEmmetConfig
from emmet_assist.tracking.diagnostics import StageTimer
from emmet_assist.tracking.tracker import EditorSession, Tracker

logger = logging.getLogger(__name__)

CompletionReason = Literal["auto", "manual"]

# First char: word bound (or nothing), second: abbreviation start.
_TRACKING_TRIGGER_RE = re.compile(r"[\s>]?[a-zA-Z.#\[(]")

TrackingGate = Callable[[EditorSession, int], bool]


@dataclass(frozen=True)
class CompletionRequest:
    position: int
    line: str
    reason: CompletionReason = "auto"


@dataclass(frozen=True)
class CompletionCandidate:
    label: str
    insert_text: str
    range: tuple[int, int]
    detail: str
    documentation: str
    tokenize: bool = True
    kind: str = "expression"

    def to_item_dict(self) -> dict[str, Any]:
        start, end = self.range
        return {
            "label": self.label,
            "insert_text": self.insert_text,
            "kind": self.kind,
            "detail": self.detail,
            "documentation": self.documentation,
            "tokenize": self.tokenize,
            "range": {"start": start, "end": end},
            "source": "emmet",
        }


@dataclass(slots=True)
class CandidateResult:
    ok: bool
    candidate: CompletionCandidate | None = None
    reason: str = ""


class AbbreviationCompletionProvider:
    def __init__(
        self,
        engine: ExpansionEngine,
        *,
        resolver: ActivationContextResolver | None = None,
        tracking_allowed: TrackingGate | None = None,
        settings: Any = None,
    ) -> None:
        self._engine = engine
        self._cfg = NormalizedEmmetConfig.from_mapping(settings or {})
        self._resolver = resolver or SyntaxActivationResolver(self._cfg)
        self._tracking_allowed = tracking_allowed

    # ---------- Public API ----------

    @property
    def settings(self) -> NormalizedEmmetConfig:
        return self._cfg

    def update_settings(self, settings: Any) -> None:
        self._cfg = NormalizedEmmetConfig.from_mapping(settings)
        update = getattr(self._resolver, "update_settings", None)
        if callable(update):
            update(self._cfg)

    def provide_completion_items(
        self,
        session: EditorSession,
        request: CompletionRequest,
    ) -> list[CompletionCandidate]:
        if not self._cfg.enabled:
            return []

        timer = StageTimer()
        result: list[CompletionCandidate] = []
        try:
            tracker = session.get_tracker()
            logger.debug(
                "cmpl %d, reason %s, has tracker? %s",
                request.position,
                request.reason,
                tracker is not None,
            )

            if tracker is None:
                if request.reason == "manual":
                    # User forcibly requested completion popup
                    tracker = self._extract_abbreviation_tracking(session, request)
                    timer.mark("Extract tracking")
                elif self._is_tracking_allowed(session, request.position):
                    tracker = self._start_abbreviation_tracking(session, request)
                    timer.mark("Start tracking")

            if tracker is not None:
                outcome = self.create_expand_abbreviation_completion(session, tracker)
                if outcome.ok and outcome.candidate is not None:
                    result.append(outcome.candidate)
                else:
                    self._dispose_invalid(session, tracker, request, outcome.reason)
                timer.mark("Create abbreviation completion")
        except Exception:
            logger.exception("Emmet completion failed at %d", request.position)
            return []

        if self._cfg.log_timings:
            logger.info("%s", timer.dump())
        else:
            logger.debug("%s", timer.dump())
        logger.debug("return items: %d", len(result))
        return result

    def handle_change(self, session: EditorSession, position: int, removed: int, inserted: str) -> None:
        session.handle_change(position, removed, inserted)

    def handle_selection_change(self, session: EditorSession, caret: int) -> None:
        session.handle_selection_change(caret)

    def create_expand_abbreviation_completion(self, session: EditorSession, tracker: Tracker) -> CandidateResult:
        abbr = session.surface.text_in_range(tracker.start, tracker.end)
        logger.debug("Expand %r", abbr)

        config = build_config(tracker.context, tracker.options)
        snippet = expand_safely(self._engine, abbr, config)
        if not snippet.ok:
            return CandidateResult(ok=False, reason=snippet.error)

        preview = expand_safely(
            self._engine,
            abbr,
            build_preview_config(config),
        )
        if not preview.ok:
            return CandidateResult(ok=False, reason=preview.error)

        return CandidateResult(
            ok=True,
            candidate=CompletionCandidate(
                label=abbr,
                insert_text=snippet.text,
                range=tracker.range,
                detail=self._cfg.detail_label,
                documentation=preview.text,
            ),
        )

    # ---------- Tracking decisions ----------

    def _is_tracking_allowed(self, session: EditorSession, position: int) -> bool:
        if self._tracking_allowed is not None:
            return bool(self._tracking_allowed(session, position))
        return self._cfg.enable_tracking and session.last_edit_was_typing_at(position, self._cfg.bracket_pairs)

    def _start_abbreviation_tracking(self, session: EditorSession, request: CompletionRequest) -> Tracker | None:
        prefix = request.line[-2:]
        pos = request.position
        if not _TRACKING_TRIGGER_RE.fullmatch(prefix):
            return None

        abbr_ctx = self._resolver.resolve(session, pos)
        if abbr_ctx is None:
            return None

        start = pos - 1
        end = pos
        closer = self._cfg.bracket_pairs.get(prefix[-1])
        if closer is not None:
            doc_length = session.surface.document_length()
            if session.surface.text_in_range(pos, min(pos + 1, doc_length)) == closer:
                end += 1

        return session.start_tracking(start, end, abbr_ctx, self._output_options(session, abbr_ctx.inline))

    def _extract_abbreviation_tracking(self, session: EditorSession, request: CompletionRequest) -> Tracker | None:
        pos = request.position
        abbr_ctx = self._resolver.resolve(session, pos)
        if abbr_ctx is None:
            return None

        options = self._output_options(session, abbr_ctx.inline)
        try:
            bounds = self._engine.extract(session, pos, build_config(abbr_ctx, options))
        except ExpansionError:
            bounds = None
        if bounds is None or not (0 <= bounds.start <= bounds.end <= pos):
            return None

        return session.start_tracking(bounds.start, bounds.end, abbr_ctx, options)

    def _dispose_invalid(
        self,
        session: EditorSession,
        tracker: Tracker,
        request: CompletionRequest,
        reason: str,
    ) -> None:
        # Caret inside the abbreviation: leave the tracker so the user can fix it.
        logger.debug("abbreviation is invalid: %s", reason)
        if request.position == tracker.end:
            session.stop_tracking()

    def _output_options(self, session: EditorSession, inline: bool) -> OutputOptions:
        indent_unit = getattr(session.surface, "indent_unit", None)
        return get_output_options(
            self._cfg,
            inline=inline,
            indent_unit=indent_unit() if callable(indent_unit) else None,
        )
