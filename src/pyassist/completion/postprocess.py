"""
Cleanup of raw provider responses before they are offered as completions.

Functions:
    strip_code_fences: Remove a wrapping markdown fence
    looks_like_code: Line level "is this code?" heuristic
    post_process_completion: Full cleanup pipeline
    get_indentation: Leading whitespace of a line
"""

from __future__ import annotations

import regex as regex_mod

MAX_COMPLETION_LINES = 10

_OPENING_FENCE = regex_mod.compile(r"^```[\w+#.-]*[ \t]*\n?")
_CLOSING_FENCE = regex_mod.compile(r"\n?```[ \t]*$")
_INDENTATION = regex_mod.compile(r"^[ \t]*")

# Prose openers; a following ".", "(", "[" or "=" means code such as this.x
EXPLANATION_PREFIX = regex_mod.compile(
    r"^\s*(?:Here|This|The|Note|Explanation)\b(?!\s*[.(\[=])", regex_mod.IGNORECASE
)

CODE_LINE_PATTERNS: tuple[regex_mod.Pattern, ...] = tuple(
    regex_mod.compile(p)
    for p in (
        r"^[a-zA-Z_$][\w$]*\s*[=:]",  # assignment or key
        r"^(?:if|else|elif|for|while|try|catch|except|finally|with|function|class|def|import|from|export|async|await)\b",
        r"[{}();,:\]]$",  # ends with code punctuation
        r"^(?://|#|\*|/\*)",  # comments
        r"^[a-zA-Z_$][\w$.]*\s*\(",  # call
        r"^\.",  # method chaining
        r"^return\b",
        r"^(?:const|let|var|public|private|protected|static|yield|raise|throw|pass|break|continue)\b",
        r"^[)\]}]",  # closing bracket
    )
)


def strip_code_fences(text: str) -> str:
    """Remove one opening and one closing markdown fence around ``text``."""
    text = _OPENING_FENCE.sub("", text, count=1)
    return _CLOSING_FENCE.sub("", text, count=1)


def looks_like_code(line: str) -> bool:
    trimmed = line.strip()
    if not trimmed:
        return True
    return any(p.search(trimmed) for p in CODE_LINE_PATTERNS)


def get_indentation(line: str) -> str:
    m = _INDENTATION.match(line)
    return m.group(0) if m else ""


def post_process_completion(
    raw: str | None, current_line: str, max_lines: int = MAX_COMPLETION_LINES
) -> str:
    """
    Turn a raw provider response into insertable completion text.

    Steps: trim, strip code fences, drop prose lines, keep lines that look
    like code (or are blank), cap at ``max_lines`` and indent every line
    after the first to the current line's indentation. The first line is
    inserted at the cursor and gets no extra indentation.

    Args:
        raw: The provider's response
        current_line: Full text of the line the cursor is on
        max_lines: Maximum number of lines kept

    Returns:
        The cleaned completion, '' when nothing usable remains
    """
    if not raw:
        return ""

    text = strip_code_fences(raw.replace("\r\n", "\n").strip())
    kept = [
        line
        for line in text.split("\n")
        if not EXPLANATION_PREFIX.match(line) and looks_like_code(line)
    ]
    text = "\n".join(kept).strip()
    if not text:
        return ""

    lines = text.split("\n")[:max_lines]
    indentation = get_indentation(current_line)
    if len(lines) > 1 and indentation:
        lines = [lines[0]] + [indentation + line if line.strip() else line for line in lines[1:]]
    return "\n".join(lines)
