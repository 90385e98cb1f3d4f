from __future__ import annotations

from typing import Any

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import QPlainTextEdit

from emmet_assist.tracking.provider import AbbreviationCompletionProvider, CompletionRequest
from emmet_assist.tracking.tracker import EditorSession


def narrow_change(old: str, new: str) -> tuple[int, str, str]:
    """Strip the common prefix/suffix of a reported change.

    QTextDocument may report a whole-block (or whole-document) replacement for
    a single typed character; returns (offset, removed_text, inserted_text).
    """
    prefix = 0
    limit = min(len(old), len(new))
    while prefix < limit and old[prefix] == new[prefix]:
        prefix += 1
    suffix = 0
    limit -= prefix
    while suffix < limit and old[len(old) - 1 - suffix] == new[len(new) - 1 - suffix]:
        suffix += 1
    return prefix, old[prefix:len(old) - suffix], new[prefix:len(new) - suffix]


class QtEditorSurface:
    """``TextSurface`` view over a ``QPlainTextEdit`` document."""

    def __init__(self, editor: QPlainTextEdit) -> None:
        self._editor = editor

    @property
    def editor(self) -> QPlainTextEdit:
        return self._editor

    def document_length(self) -> int:
        # characterCount() includes the trailing paragraph separator
        return max(0, self._editor.document().characterCount() - 1)

    def text_in_range(self, start: int, end: int) -> str:
        length = self.document_length()
        start = max(0, min(int(start), length))
        end = max(start, min(int(end), length))
        if start == end:
            return ""
        cursor = QTextCursor(self._editor.document())
        cursor.setPosition(start)
        cursor.setPosition(end, QTextCursor.KeepAnchor)
        return cursor.selectedText().replace("\u2029", "\n")

    def caret_position(self) -> int:
        return self._editor.textCursor().position()

    def line_before_caret(self) -> str:
        c = self._editor.textCursor()
        line = c.block().text()
        return line[:c.positionInBlock()]

    def indent_unit(self) -> str | None:
        width = getattr(self._editor, "indent_width", None)
        if not isinstance(width, int):
            return None
        if bool(getattr(self._editor, "use_tabs", False)):
            return "\t"
        return " " * max(1, width)


class AbbreviationCompletionController(QObject):
    completionReady = Signal(object)  # {editor_id, items, reason}

    def __init__(self, provider: AbbreviationCompletionProvider, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._provider = provider
        self._sessions: dict[str, EditorSession] = {}
        self._surfaces: dict[str, QtEditorSurface] = {}
        self._snapshots: dict[str, str] = {}

    # ---------- Public API ----------

    def update_settings(self, settings: Any) -> None:
        self._provider.update_settings(settings)

    def attach_editor(self, editor: QPlainTextEdit, *, editor_id: str, language_id: str) -> EditorSession:
        key = str(editor_id or "").strip()
        if not key:
            raise ValueError("editor_id is required")
        self.detach_editor(key)

        surface = QtEditorSurface(editor)
        session = EditorSession(surface, editor_id=key, language_id=language_id)
        self._sessions[key] = session
        self._surfaces[key] = surface
        self._snapshots[key] = editor.toPlainText()

        editor.document().contentsChange.connect(
            lambda pos, removed, added, editor_key=key: self._on_contents_change(editor_key, pos, removed, added)
        )
        editor.cursorPositionChanged.connect(lambda editor_key=key: self._on_cursor_moved(editor_key))
        editor.destroyed.connect(lambda *_args, editor_key=key: self.detach_editor(editor_key))
        return session

    def detach_editor(self, editor_id: str) -> None:
        key = str(editor_id or "").strip()
        self._sessions.pop(key, None)
        self._surfaces.pop(key, None)
        self._snapshots.pop(key, None)

    def session_for(self, editor_id: str) -> EditorSession | None:
        return self._sessions.get(str(editor_id or "").strip())

    def set_language(self, editor_id: str, language_id: str) -> None:
        session = self.session_for(editor_id)
        if session is None:
            return
        session.stop_tracking()
        session.language_id = str(language_id or "plaintext").strip().lower()

    def request_completion(self, editor_id: str, reason: str = "auto") -> dict[str, Any]:
        key = str(editor_id or "").strip()
        session = self._sessions.get(key)
        surface = self._surfaces.get(key)
        payload: dict[str, Any] = {"editor_id": key, "items": [], "reason": reason}
        if session is None or surface is None:
            self.completionReady.emit(payload)
            return payload

        request = CompletionRequest(
            position=surface.caret_position(),
            line=surface.line_before_caret(),
            reason="manual" if reason == "manual" else "auto",
        )
        items = self._provider.provide_completion_items(session, request)
        payload["items"] = [item.to_item_dict() for item in items]
        self.completionReady.emit(payload)
        return payload

    # ---------- Editor signals ----------

    def _on_contents_change(self, editor_id: str, position: int, removed: int, added: int) -> None:
        session = self._sessions.get(editor_id)
        surface = self._surfaces.get(editor_id)
        if session is None or surface is None:
            return
        previous = self._snapshots.get(editor_id, "")
        current = surface.editor.toPlainText()
        self._snapshots[editor_id] = current

        old_segment = previous[position:position + removed]
        new_segment = current[position:position + added]
        offset, removed_text, inserted = narrow_change(old_segment, new_segment)
        self._provider.handle_change(session, position + offset, len(removed_text), inserted)

    def _on_cursor_moved(self, editor_id: str) -> None:
        session = self._sessions.get(editor_id)
        surface = self._surfaces.get(editor_id)
        if session is None or surface is None:
            return
        self._provider.handle_selection_change(session, surface.caret_position())
