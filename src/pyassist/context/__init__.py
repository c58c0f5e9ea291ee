"""
Workspace context assembly: related files, imports and project metadata
sent alongside a completion request.
"""

from .assembler import ContextAssembler
from .formatting import format_for_prompt
from .imports import RESOLVE_EXTENSIONS, extract_import_specifiers, extract_imports, resolve_import_path
from .project import PROJECT_MARKERS, detect_project_type, workspace_name

__all__ = [
    "ContextAssembler",
    "format_for_prompt",
    "RESOLVE_EXTENSIONS",
    "extract_import_specifiers",
    "extract_imports",
    "resolve_import_path",
    "PROJECT_MARKERS",
    "detect_project_type",
    "workspace_name",
]
