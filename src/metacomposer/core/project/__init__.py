"""
Project dependency guide built from package.json.
"""

from .service import (
    NO_DEPENDENCY_INFO,
    clean_repository_url,
    dependency_guide,
    extract_repository_url,
    format_context7_id,
    get_info,
)

__all__ = [
    "NO_DEPENDENCY_INFO",
    "clean_repository_url",
    "dependency_guide",
    "extract_repository_url",
    "format_context7_id",
    "get_info",
]
