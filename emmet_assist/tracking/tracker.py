"""Per-editor abbreviation tracking state.

An ``EditorSession`` owns the single tracked abbreviation region of one
editing surface. Completion requests read it, edits and caret moves keep it
in sync or drop it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from emmet_assist.services.activation_context import ActivationContext
from emmet_assist.services.expansion import OutputOptions

logger = logging.getLogger(__name__)

_LINE_BREAKS = ("\n", "\r", "\u2029")


class TextSurface(Protocol):
    def document_length(self) -> int:
        ...

    def text_in_range(self, start: int, end: int) -> str:
        ...


@dataclass(slots=True)
class Tracker:
    start: int
    end: int
    context: ActivationContext
    options: OutputOptions

    @property
    def range(self) -> tuple[int, int]:
        return self.start, self.end

    def contains(self, position: int) -> bool:
        return self.start <= position <= self.end


class EditorSession:
    def __init__(
        self,
        surface: TextSurface,
        *,
        editor_id: str = "",
        language_id: str = "plaintext",
    ) -> None:
        self.surface = surface
        self.editor_id = str(editor_id or "")
        self.language_id = str(language_id or "plaintext").strip().lower()
        self._tracker: Tracker | None = None
        self._seen_change = False
        # (position, text) of the last two pure insertions, newest last
        self._inserts: list[tuple[int, str]] = []

    # ---------- Tracker slot ----------

    def get_tracker(self) -> Tracker | None:
        return self._tracker

    def start_tracking(
        self,
        start: int,
        end: int,
        context: ActivationContext,
        options: OutputOptions,
    ) -> Tracker:
        start = max(0, int(start))
        end = max(start, int(end))
        if self._tracker is not None:
            logger.debug("Replacing tracker %s in %r", self._tracker.range, self.editor_id)
        self._tracker = Tracker(start=start, end=end, context=context, options=options)
        logger.debug("Start tracking [%d, %d) in %r", start, end, self.editor_id)
        return self._tracker

    def stop_tracking(self) -> None:
        if self._tracker is None:
            return
        logger.debug("Stop tracking %s in %r", self._tracker.range, self.editor_id)
        self._tracker = None

    # ---------- Document/caret events ----------

    def handle_change(self, position: int, removed: int, inserted: str) -> None:
        position = max(0, int(position))
        removed = max(0, int(removed))
        inserted = str(inserted or "")

        self._seen_change = True
        if removed == 0 and inserted:
            self._inserts = [*self._inserts[-1:], (position, inserted)]
        else:
            self._inserts = []

        tracker = self._tracker
        if tracker is None:
            return

        delta = len(inserted) - removed
        change_end = position + removed

        if position < tracker.start and change_end <= tracker.start:
            tracker.start += delta
            tracker.end += delta
            return

        if position > tracker.end:
            return

        if position >= tracker.start and change_end <= tracker.end:
            if any(ch in inserted for ch in _LINE_BREAKS):
                self.stop_tracking()
                return
            tracker.end += delta
            if tracker.end <= tracker.start:
                self.stop_tracking()
            return

        # Edit straddles a range boundary.
        self.stop_tracking()

    def handle_selection_change(self, caret: int) -> None:
        tracker = self._tracker
        if tracker is not None and not tracker.contains(int(caret)):
            self.stop_tracking()

    def last_edit_was_typing_at(self, position: int, bracket_pairs: dict[str, str] | None = None) -> bool:
        """True when the caret sits right after a character the user just typed.

        An auto-paired bracket counts as typing the opener, whether the editor
        inserts the pair in one edit or the closer as a second edit.
        """
        if not self._seen_change:
            return True
        if not self._inserts:
            return False
        position = int(position)
        pairs = bracket_pairs or {}
        start, text = self._inserts[-1]

        if len(text) == 1 and text not in _LINE_BREAKS:
            if start + 1 == position:
                return True
            if len(self._inserts) == 2 and start == position:
                opener_at, opener = self._inserts[0]
                return opener_at + 1 == start and pairs.get(opener) == text
            return False

        if len(text) == 2 and pairs.get(text[0]) == text[1]:
            return start + 1 == position
        return False
