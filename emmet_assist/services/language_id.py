"""Language-id resolution helpers for Emmet-capable documents.

Pure utility functions that map filenames/extensions to a language id and
classify language ids into the Emmet syntax kinds (markup or stylesheet).
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Literal

SyntaxKind = Literal["markup", "stylesheet"]

_EXTENSION_LANGUAGE_IDS: dict[str, str] = {
    ".html": "html",
    ".htm": "html",
    ".xhtml": "html",
    ".vue": "vue",
    ".svelte": "svelte",
    ".jsx": "javascriptreact",
    ".tsx": "typescriptreact",
    ".xml": "xml",
    ".svg": "xml",
    ".xsl": "xsl",
    ".xslt": "xsl",
    ".php": "php",
    ".phtml": "php",
    ".haml": "haml",
    ".pug": "pug",
    ".jade": "pug",
    ".slim": "slim",
    ".css": "css",
    ".qss": "css",
    ".scss": "scss",
    ".sass": "sass",
    ".less": "less",
    ".sss": "sss",
    ".styl": "stylus",
    ".py": "python",
    ".js": "javascript",
    ".ts": "typescript",
    ".md": "markdown",
}

# Emmet syntax names differ from editor language ids for a few languages.
_EMMET_SYNTAX_ALIASES: dict[str, str] = {
    "javascriptreact": "jsx",
    "typescriptreact": "jsx",
    "vue": "html",
    "svelte": "html",
    "php": "html",
}


def language_id_for_path(file_path: str | None, *, default: str = "plaintext") -> str:
    """Return a normalized language id for a file path."""
    path_text = str(file_path or "").strip()
    if not path_text:
        return str(default or "plaintext").strip().lower() or "plaintext"

    suffix = Path(path_text).suffix.lower()
    if suffix in _EXTENSION_LANGUAGE_IDS:
        return _EXTENSION_LANGUAGE_IDS[suffix]

    return str(default or "plaintext").strip().lower() or "plaintext"


def emmet_syntax_for_language(language_id: str | None) -> str:
    key = str(language_id or "").strip().lower()
    return _EMMET_SYNTAX_ALIASES.get(key, key)


def syntax_kind(
    syntax: str | None,
    *,
    stylesheet_syntaxes: Iterable[str] = ("css", "scss", "sass", "less", "sss", "stylus"),
) -> SyntaxKind:
    key = str(syntax or "").strip().lower()
    if key in {str(s).strip().lower() for s in stylesheet_syntaxes}:
        return "stylesheet"
    return "markup"
