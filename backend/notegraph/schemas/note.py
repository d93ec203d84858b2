"""
NoteGraph — Pydantic Schemas
==============================

What:  Pydantic models for the non-GraphQL parts of the contract: the resolved
       partial update passed from resolvers to the service, and the health
       check response.
Why:   GraphQL types (api/types.py) fix the wire shape; these models carry
       validated data between layers and describe the REST health endpoint.
"""

from typing import Dict, Mapping, Optional

from pydantic import BaseModel, Field


class NotePatch(BaseModel):
    """
    A partial update of a note.

    Each field is either present-and-apply or absent-and-skip. Presence is
    tracked by pydantic's `model_fields_set`, so a field explicitly set to
    "" is distinguishable from one that was never set.

    Example:
        NotePatch.from_arguments({"title": "New"}).changes()  → {"title": "New"}
        NotePatch.from_arguments({"title": ""}).changes()     → {}
    """
    title: Optional[str] = Field(default=None)
    content: Optional[str] = Field(default=None)

    @classmethod
    def from_arguments(
        cls,
        arguments: Mapping[str, Optional[str]],
        apply_empty: bool = False,
    ) -> "NotePatch":
        """
        Resolve raw updateNote arguments into a patch.

        None always means "not provided". An empty string is dropped too unless
        `apply_empty` is set, matching how the API has always behaved.
        """
        present = {
            name: value
            for name, value in arguments.items()
            if value is not None and (apply_empty or value != "")
        }
        return cls(**present)

    def changes(self) -> Dict[str, str]:
        """Only the fields that should be written."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer health checks.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
