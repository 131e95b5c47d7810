"""Base model for skillsqueue wire types.

Every model that is persisted to disk or sent to clients inherits from
:class:`SkillsQueueModel`, which maps snake_case fields to the camelCase
keys used by the JSON files and the kiosk pages
(``skillsCutoffTime``, ``nowServing`` ...).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SkillsQueueModel(BaseModel):
    """Base for persisted and broadcast models."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
