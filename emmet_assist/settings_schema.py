from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypedDict


DEFAULT_BRACKET_PAIRS: dict[str, str] = {
    "{": "}",
    "[": "]",
    "(": ")",
}

DEFAULT_MARKUP_SYNTAXES = (
    "html",
    "xml",
    "xsl",
    "jsx",
    "javascriptreact",
    "typescriptreact",
    "vue",
    "svelte",
    "php",
    "haml",
    "pug",
    "slim",
)

DEFAULT_STYLESHEET_SYNTAXES = (
    "css",
    "scss",
    "sass",
    "less",
    "sss",
    "stylus",
)


class EmmetAssistSettings(TypedDict, total=False):
    enabled: bool
    enable_tracking: bool
    bracket_pairs: dict[str, str]
    detail_label: str
    indent: str
    markup_syntaxes: list[str]
    stylesheet_syntaxes: list[str]
    log_timings: bool


def default_emmet_settings() -> EmmetAssistSettings:
    return {
        "enabled": True,
        "enable_tracking": True,
        "bracket_pairs": dict(DEFAULT_BRACKET_PAIRS),
        "detail_label": "Emmet",
        "indent": "\t",
        "markup_syntaxes": list(DEFAULT_MARKUP_SYNTAXES),
        "stylesheet_syntaxes": list(DEFAULT_STYLESHEET_SYNTAXES),
        "log_timings": False,
    }


def _normalize_pairs(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return dict(DEFAULT_BRACKET_PAIRS)
    pairs: dict[str, str] = {}
    for opener, closer in raw.items():
        if not isinstance(opener, str) or not isinstance(closer, str):
            continue
        if len(opener) != 1 or len(closer) != 1:
            continue
        pairs[opener] = closer
    return pairs or dict(DEFAULT_BRACKET_PAIRS)


def _normalize_syntax_list(raw: Any, fallback: tuple[str, ...]) -> list[str]:
    if isinstance(raw, str):
        raw = [part for part in raw.split(",")]
    if not isinstance(raw, (list, tuple, set)):
        return list(fallback)
    out: list[str] = []
    for item in raw:
        key = str(item or "").strip().lower()
        if key and key not in out:
            out.append(key)
    return out


def normalize_emmet_settings(raw: Any) -> EmmetAssistSettings:
    defaults = default_emmet_settings()
    data: dict[str, Any] = dict(defaults)
    if isinstance(raw, dict):
        for key, value in raw.items():
            data[str(key)] = value

    indent = data.get("indent", defaults["indent"])
    if not isinstance(indent, str) or not indent or indent.strip():
        indent = defaults["indent"]

    return {
        "enabled": bool(data.get("enabled", defaults["enabled"])),
        "enable_tracking": bool(data.get("enable_tracking", defaults["enable_tracking"])),
        "bracket_pairs": _normalize_pairs(data.get("bracket_pairs")),
        "detail_label": str(data.get("detail_label") or "").strip() or defaults["detail_label"],
        "indent": indent,
        "markup_syntaxes": _normalize_syntax_list(data.get("markup_syntaxes"), DEFAULT_MARKUP_SYNTAXES),
        "stylesheet_syntaxes": _normalize_syntax_list(data.get("stylesheet_syntaxes"), DEFAULT_STYLESHEET_SYNTAXES),
        "log_timings": bool(data.get("log_timings", defaults["log_timings"])),
    }


@dataclass(slots=True)
class NormalizedEmmetConfig:
    enabled: bool = True
    enable_tracking: bool = True
    bracket_pairs: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_BRACKET_PAIRS))
    detail_label: str = "Emmet"
    indent: str = "\t"
    markup_syntaxes: tuple[str, ...] = DEFAULT_MARKUP_SYNTAXES
    stylesheet_syntaxes: tuple[str, ...] = DEFAULT_STYLESHEET_SYNTAXES
    log_timings: bool = False

    @classmethod
    def from_mapping(cls, data: Any) -> "NormalizedEmmetConfig":
        n = normalize_emmet_settings(data)
        return cls(
            enabled=bool(n["enabled"]),
            enable_tracking=bool(n["enable_tracking"]),
            bracket_pairs=dict(n["bracket_pairs"]),
            detail_label=str(n["detail_label"]),
            indent=str(n["indent"]),
            markup_syntaxes=tuple(n["markup_syntaxes"]),
            stylesheet_syntaxes=tuple(n["stylesheet_syntaxes"]),
            log_timings=bool(n["log_timings"]),
        )
