"""
OpenAPI document browsing.

Load an OpenAPI document from a URL or file, number its operations, and
render listings and per-endpoint detail pages.
"""

from .loader import is_remote, load_document
from .models import Endpoint
from .service import (
    extract_endpoints,
    find_endpoint,
    render_document_info,
    render_endpoint_details,
    render_endpoint_list,
)

__all__ = [
    "Endpoint",
    "extract_endpoints",
    "find_endpoint",
    "is_remote",
    "load_document",
    "render_document_info",
    "render_endpoint_details",
    "render_endpoint_list",
]
