"""
OpenAPI endpoint extraction and rendering.

Turns a parsed OpenAPI document into a numbered endpoint listing (YAML) and
per-endpoint Markdown detail pages.
"""

import json
from collections.abc import Iterator
from typing import Any

import yaml

from metacomposer.core.exceptions import InvalidArgumentError
from metacomposer.core.openapi.models import NON_OPERATION_KEYS, Endpoint


def _iter_operations(document: dict[str, Any]) -> Iterator[tuple[str, str, dict[str, Any]]]:
    paths = document.get("paths") or {}
    if not isinstance(paths, dict):
        return

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if method in NON_OPERATION_KEYS or not isinstance(operation, dict):
                continue
            yield str(path), str(method), operation


def extract_endpoints(document: dict[str, Any]) -> list[Endpoint]:
    """
    Number every operation in document order, starting at 1.

    Path item keys that are not operations (parameters, servers, summary,
    description, $ref) are skipped.
    """
    return [
        Endpoint(
            id=index,
            method=method.upper(),
            path=path,
            operation_id=operation.get("operationId"),
            summary=operation.get("summary"),
            description=operation.get("description"),
            tags=operation.get("tags"),
        )
        for index, (path, method, operation) in enumerate(_iter_operations(document), start=1)
    ]


def render_endpoint_list(document: dict[str, Any]) -> str:
    """YAML listing of every endpoint as id, verb, path and description."""
    rows = [endpoint.to_listing() for endpoint in extract_endpoints(document)]
    return yaml.safe_dump(rows, sort_keys=False, allow_unicode=True).strip()


def find_endpoint(document: dict[str, Any], endpoint_id: str) -> tuple[Endpoint, dict[str, Any]]:
    """
    Resolve a listing number to its endpoint and raw operation object.

    Raises:
        InvalidArgumentError: If endpoint_id is not a positive integer or is
            out of range
    """
    try:
        numeric_id = int(endpoint_id)
    except ValueError:
        numeric_id = 0
    if numeric_id < 1:
        raise InvalidArgumentError(
            "id",
            endpoint_id,
            f"Invalid ID '{endpoint_id}'. Please provide a valid numeric ID.",
        )

    endpoints = extract_endpoints(document)
    if numeric_id > len(endpoints):
        if endpoints:
            valid = f"Valid IDs are 1-{len(endpoints)}."
        else:
            valid = "The document has no endpoints."
        raise InvalidArgumentError(
            "id",
            endpoint_id,
            f"Endpoint with ID '{endpoint_id}' not found. {valid}",
        )

    operations = list(_iter_operations(document))
    return endpoints[numeric_id - 1], operations[numeric_id - 1][2]


def _schema_block(schema: Any) -> str:
    return "```json\n" + json.dumps(schema, indent=2, default=str) + "\n```\n\n"


def _render_content(content: dict[str, Any]) -> str:
    output = ""
    for content_type, media_type in content.items():
        output += f"**Content-Type:** `{content_type}`\n\n"
        if isinstance(media_type, dict) and media_type.get("schema"):
            output += _schema_block(media_type["schema"])
    return output


def _render_parameters(parameters: list[dict[str, Any]]) -> str:
    output = "## Parameters\n\n"
    for param in parameters:
        required = " *(required)*" if param.get("required") else ""
        description = param.get("description") or "No description"
        output += f"- **{param.get('name')}**{required} ({param.get('in')}): {description}\n"
        schema = param.get("schema")
        if isinstance(schema, dict):
            output += f"  - Type: `{schema.get('type', 'any')}`\n"
            if schema.get("enum"):
                values = ", ".join(f"`{value}`" for value in schema["enum"])
                output += f"  - Enum: {values}\n"
    return output + "\n"


def _render_request_body(request_body: dict[str, Any]) -> str:
    output = "## Request Body\n\n"
    if request_body.get("description"):
        output += f"{request_body['description']}\n\n"
    if request_body.get("required"):
        output += "*Required*\n\n"
    if isinstance(request_body.get("content"), dict):
        output += _render_content(request_body["content"])
    return output


def _render_responses(responses: dict[str, Any]) -> str:
    output = "## Responses\n\n"
    for status_code, response in responses.items():
        output += f"### {status_code}\n\n"
        if not isinstance(response, dict):
            continue
        if response.get("description"):
            output += f"{response['description']}\n\n"
        if isinstance(response.get("content"), dict):
            output += _render_content(response["content"])
    return output


def _render_servers(servers: list[dict[str, Any]]) -> str:
    output = "## Servers\n\n"
    for server in servers:
        output += f"- {server.get('url')}"
        if server.get("description"):
            output += f" - {server['description']}"
        output += "\n"
    return output + "\n"


def render_endpoint_details(
    document: dict[str, Any],
    endpoint: Endpoint,
    operation: dict[str, Any],
) -> str:
    """Markdown page for one endpoint."""
    output = f"# {endpoint.method} {endpoint.path}\n\n"

    if operation.get("summary"):
        output += f"**{operation['summary']}**\n\n"
    if operation.get("description"):
        output += f"{operation['description']}\n\n"
    if operation.get("operationId"):
        output += f"**Operation ID:** `{operation['operationId']}`\n\n"
    if operation.get("tags"):
        output += f"**Tags:** {', '.join(endpoint.tags or [])}\n\n"

    if operation.get("parameters"):
        output += _render_parameters(operation["parameters"])
    if isinstance(operation.get("requestBody"), dict):
        output += _render_request_body(operation["requestBody"])
    if isinstance(operation.get("responses"), dict):
        output += _render_responses(operation["responses"])
    if document.get("servers"):
        output += _render_servers(document["servers"])

    return output.strip()


def render_document_info(document: dict[str, Any]) -> str:
    """YAML summary of the API described by document."""
    info = document.get("info") or {}
    summary: dict[str, Any] = {
        "title": info.get("title"),
        "version": info.get("version"),
    }
    if info.get("description"):
        summary["description"] = info["description"]
    summary["openapi"] = document.get("openapi") or document.get("swagger")
    servers = [server.get("url") for server in document.get("servers") or [] if server.get("url")]
    if servers:
        summary["servers"] = servers
    summary["endpoints"] = len(extract_endpoints(document))
    return yaml.safe_dump(summary, sort_keys=False, allow_unicode=True).strip()
