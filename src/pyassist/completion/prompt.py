"""Completion prompt construction."""

from __future__ import annotations

from ..core.types import CursorPosition
from ..workspace.protocols import EditorDocument

CURSOR_MARKER = "<CURSOR>"

_INSTRUCTIONS = """Instructions:
- Complete the code naturally and idiomatically
- Follow the existing code style and patterns
- Keep completions concise and focused
- Don't include the cursor marker in your response
- Only provide the completion text, no explanations
- Ensure the completion makes semantic sense in context"""


def surrounding_lines(
    document: EditorDocument, position: CursorPosition, preceding: int, following: int
) -> tuple[str, str]:
    """The ``preceding`` lines above and ``following`` lines below the cursor line."""
    lines = [line.rstrip("\r") for line in document.lines]
    before = lines[max(0, position.line - preceding) : position.line]
    after = lines[position.line + 1 : position.line + 1 + following]
    return "\n".join(before), "\n".join(after)


def build_completion_prompt(
    document: EditorDocument,
    position: CursorPosition,
    context_text: str,
    preceding: int = 10,
    following: int = 5,
) -> str:
    """
    Build the instruction prompt for a completion at ``position``.

    The code window marks the cursor with ``<CURSOR>``; ``context_text`` is
    the rendered workspace context.
    """
    language = document.language_id
    text_before_cursor = document.line_at(position.line)[: position.character]
    above, below = surrounding_lines(document, position, preceding, following)

    return (
        f"You are an expert {language} developer. Complete the code based on the context.\n"
        f"\n"
        f"{context_text}\n"
        f"\n"
        f"Current code context:\n"
        f"```{language}\n"
        f"{above}\n"
        f"{text_before_cursor}{CURSOR_MARKER}\n"
        f"{below}\n"
        f"```\n"
        f"\n"
        f"{_INSTRUCTIONS}\n"
        f"\n"
        f"Completion:"
    )
