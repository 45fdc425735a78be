"""
OpenAPI data models.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

# Path item keys that are not HTTP operations
NON_OPERATION_KEYS = frozenset({"parameters", "servers", "summary", "description", "$ref"})


class Endpoint(BaseModel):
    """
    One operation of an OpenAPI document, numbered in document order.

    Attributes:
        id: 1-based position among all operations
        method: Upper-case HTTP verb
        path: Path template, e.g. /pets/{petId}
    """

    id: int = Field(ge=1)
    method: str
    path: str
    operation_id: str | None = None
    summary: str | None = None
    description: str | None = None
    tags: list[str] | None = None

    @field_validator("operation_id", "summary", "description", mode="before")
    @classmethod
    def validate_text(cls, v: Any) -> str | None:
        """Stringify YAML scalars such as `operationId: 123`."""
        if v is None:
            return None
        return str(v)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v: Any) -> list[str] | None:
        """Stringify each tag; a single scalar becomes a one-item list."""
        if v is None:
            return None
        if not isinstance(v, list):
            v = [v]
        return [str(tag) for tag in v]

    @property
    def display_description(self) -> str:
        """Summary, else description, else a placeholder."""
        return self.summary or self.description or "No description available"

    def to_listing(self) -> dict[str, Any]:
        """Row shown by `openapi list`."""
        return {
            "id": self.id,
            "verb": self.method,
            "path": self.path,
            "description": self.display_description,
        }
