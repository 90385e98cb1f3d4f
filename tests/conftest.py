"""
Shared fixtures: an in-memory text surface, a scripted expansion engine and
sessions wired to them.
"""

import os
import re
from typing import List, Optional

import pytest

from emmet_assist.services.activation_context import ActivationContext
from emmet_assist.services.expansion import AbbreviationBounds, ExpandConfig, ExpansionError
from emmet_assist.tracking.provider import AbbreviationCompletionProvider
from emmet_assist.tracking.tracker import EditorSession

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_ABBR_CHARS_RE = re.compile(r"[\w.#>+*\[\]()={}$@^:\- ]+")
_EXTRACT_RE = re.compile(r"[\w.#>+*\[\]()={}$@^:\-]+$")


class MemorySurface:
    def __init__(self, text: str = "") -> None:
        self.text = text

    def document_length(self) -> int:
        return len(self.text)

    def text_in_range(self, start: int, end: int) -> str:
        return self.text[start:end]


class ScriptedEngine:
    """Expands ``abbr`` to ``<abbr>FIELD</abbr>``; unbalanced brackets fail."""

    def __init__(self) -> None:
        self.invalid: set = set()
        self.expanded: List[tuple] = []
        self.extracted: List[int] = []
        self.check_brackets = True

    def expand(self, abbreviation: str, config: ExpandConfig) -> str:
        self.expanded.append((abbreviation, config))
        if abbreviation in self.invalid or not _ABBR_CHARS_RE.fullmatch(abbreviation):
            raise ExpansionError(f"Unexpected character in {abbreviation!r}")
        pairs = (("(", ")"), ("[", "]"), ("{", "}")) if self.check_brackets else ()
        for opener, closer in pairs:
            if abbreviation.count(opener) != abbreviation.count(closer):
                raise ExpansionError(f"Unclosed {opener!r}")
        placeholder = config.options.field(1, "text")
        return f"<{abbreviation}>{placeholder}</{abbreviation}>"

    def extract(self, session, position: int, config: ExpandConfig) -> Optional[AbbreviationBounds]:
        self.extracted.append(position)
        text = session.surface.text_in_range(0, position)
        line = text.rsplit("\n", 1)[-1]
        match = _EXTRACT_RE.search(line)
        if not match:
            return None
        start = position - len(line) + match.start()
        return AbbreviationBounds(start=start, end=position)


class FixedResolver:
    def __init__(self, context: Optional[ActivationContext] = None) -> None:
        self.context = context or ActivationContext(syntax="html", kind="markup")
        self.calls: List[int] = []

    def resolve(self, session, position: int) -> Optional[ActivationContext]:
        self.calls.append(position)
        return self.context


@pytest.fixture
def engine() -> ScriptedEngine:
    return ScriptedEngine()


@pytest.fixture
def surface() -> MemorySurface:
    return MemorySurface()


@pytest.fixture
def session(surface) -> EditorSession:
    return EditorSession(surface, editor_id="editor-1", language_id="html")


@pytest.fixture
def provider(engine) -> AbbreviationCompletionProvider:
    return AbbreviationCompletionProvider(engine)


def _type_text(session: EditorSession, text: str, at: Optional[int] = None) -> int:
    """Inserts ``text`` one character at a time, like a user typing."""
    position = len(session.surface.text) if at is None else at
    for ch in text:
        body = session.surface.text
        session.surface.text = body[:position] + ch + body[position:]
        session.handle_change(position, 0, ch)
        position += 1
        session.handle_selection_change(position)
    return position


@pytest.fixture
def typist():
    return _type_text
