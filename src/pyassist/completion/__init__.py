"""
Inline completion: the eligibility gate, prompt construction, response
cleanup and the debounced single-flight controller.
"""

from .controller import (
    CancellationToken,
    CompletionRequest,
    TriggerController,
    TriggerSession,
    TriggerState,
)
from .postprocess import get_indentation, looks_like_code, post_process_completion, strip_code_fences
from .prompt import CURSOR_MARKER, build_completion_prompt
from .triggers import (
    COMMON_TRIGGER_PATTERNS,
    LANGUAGE_TRIGGER_PATTERNS,
    is_in_string_or_comment,
    should_trigger,
    trigger_patterns,
)

__all__ = [
    "CancellationToken",
    "CompletionRequest",
    "TriggerController",
    "TriggerSession",
    "TriggerState",
    "get_indentation",
    "looks_like_code",
    "post_process_completion",
    "strip_code_fences",
    "CURSOR_MARKER",
    "build_completion_prompt",
    "COMMON_TRIGGER_PATTERNS",
    "LANGUAGE_TRIGGER_PATTERNS",
    "is_in_string_or_comment",
    "should_trigger",
    "trigger_patterns",
]
