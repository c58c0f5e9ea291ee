"""Rendering of a ``WorkspaceContext`` into prompt text."""

from __future__ import annotations

from ..core.types import WorkspaceContext

INLINE_CONTENT_LIMIT = 1000


def format_for_prompt(
    context: WorkspaceContext,
    include_full_content: bool = False,
    inline_content_limit: int = INLINE_CONTENT_LIMIT,
) -> str:
    """
    Render ``context`` as prompt text.

    Sections always appear in this order: project, current file (with
    language and optional fenced content), related files, dependencies.
    Related file contents are inlined only when full content is requested
    and the file is shorter than ``inline_content_limit`` characters.
    """
    parts: list[str] = [f"Project: {context.workspace_name} ({context.project_type})\n\n"]

    current = context.current_file
    if current is not None:
        parts.append(f"Current file: {current.relative_path}\n")
        parts.append(f"Language: {current.language}\n")
        if include_full_content:
            parts.append(f"Content:\n```{current.language}\n{current.content}\n```\n\n")

    if context.related_files:
        parts.append("Related files:\n")
        for related in context.related_files:
            open_flag = ", open" if related.is_open else ""
            parts.append(f"- {related.relative_path} ({related.language}{open_flag})\n")
            if include_full_content and len(related.content) < inline_content_limit:
                parts.append(f"  ```{related.language}\n{related.content}\n```\n")
        parts.append("\n")

    if context.imports:
        parts.append(f"Dependencies: {', '.join(context.imports)}\n\n")

    return "".join(parts)
