"""Error response schema shared by every failure the API reports.

Every error escaping a route, whether an unmatched path, an HTTP error or
an uncaught exception, is rendered as ``{"success": false, "error": ...}``.
A ``stack`` is added outside production only.
"""

from typing import Literal

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every error response not produced by a route itself."""

    success: Literal[False] = Field(
        default=False,
        description="Always false for errors",
    )

    error: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Not Found", "Method Not Allowed", "Server Error"],
    )

    stack: str | None = Field(
        default=None,
        description="Formatted traceback, only outside production",
        examples=["Traceback (most recent call last):\n  ..."],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"success": False, "error": "Not Found"},
                {"success": False, "error": "Server Error"},
                {
                    "success": False,
                    "error": "division by zero",
                    "stack": "Traceback (most recent call last):\n  ...",
                },
            ]
        }
    }

    def to_content(self) -> dict[str, object]:
        """Dump for a response body, omitting an absent stack."""
        return self.model_dump(mode="json", exclude_none=True)
