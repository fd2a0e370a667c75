"""
Pact contract document model.

A pact is the set of interactions agreed between one consumer and one
provider, plus the metadata a provider-side verifier needs to read it.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .interaction import Interaction


DEFAULT_SPECIFICATION_VERSION = "2.0.0"


class Pacticipant(BaseModel):
    """A party to the contract, either the consumer or the provider."""
    name: str = Field(..., min_length=1, description="Name of the consumer or provider, e.g. 'mobile-app'")


class Pact(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    consumer: Pacticipant
    provider: Pacticipant
    interactions: List[Interaction] = Field(default_factory=list)
    specification_version: str = DEFAULT_SPECIFICATION_VERSION

    @property
    def metadata(self) -> Dict[str, Any]:
        return {"pactSpecification": {"version": self.specification_version}}

    @property
    def file_name(self) -> str:
        """Contract file name as written by the mock service."""
        return pact_file_name(self.consumer.name, self.provider.name)

    def data(self) -> Optional[Dict[str, Any]]:
        """
        Serialize the pact for the mock service.

        Returns:
            The JSON-ready document, or None when the pact has no interactions
            or any interaction is missing its description, request or response.
        """
        if not self.interactions:
            return None
        if not all(interaction.is_complete for interaction in self.interactions):
            return None

        return {
            "consumer": {"name": self.consumer.name},
            "provider": {"name": self.provider.name},
            "interactions": [interaction.as_dict() for interaction in self.interactions],
            "metadata": self.metadata,
        }


def pact_file_name(consumer: str, provider: str) -> str:
    return f"{_slug(consumer)}-{_slug(provider)}.json"


def _slug(name: str) -> str:
    return name.lower().replace(" ", "_")
