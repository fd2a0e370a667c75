from __future__ import annotations

from typing import Any, Dict, Optional

from .matchers import to_json


class Interaction:
    """
    One expected request and the response the mock service should return for it.

    Built with chained calls:

        (Interaction()
         .given("an account exists")
         .upon_receiving("a request for an account")
         .with_request("GET", "/accounts/1")
         .will_respond_with(200, body={"id": Like(1)}))

    An interaction is identified by its description together with its
    provider state; that pair must be unique within one contract.
    """

    def __init__(self) -> None:
        self.description: Optional[str] = None
        self.provider_state: Optional[str] = None
        self.request: Optional[Dict[str, Any]] = None
        self.response: Optional[Dict[str, Any]] = None

    def given(self, provider_state: str) -> "Interaction":
        self.provider_state = provider_state
        return self

    def upon_receiving(self, description: str) -> "Interaction":
        self.description = description
        return self

    def with_request(
        self,
        method: str,
        path: Any,
        query: Any = None,
        headers: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> "Interaction":
        self.request = _without_empty({
            "method": method.lower(),
            "path": path,
            "query": query,
            "headers": headers,
            "body": body,
        })
        return self

    def will_respond_with(
        self,
        status: int,
        headers: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> "Interaction":
        self.response = _without_empty({
            "status": status,
            "headers": headers,
            "body": body,
        })
        return self

    @property
    def is_complete(self) -> bool:
        return bool(self.description) and self.request is not None and self.response is not None

    def as_dict(self) -> Dict[str, Any]:
        """Render the interaction, including nested matchers, for the mock service."""
        interaction: Dict[str, Any] = {"description": self.description}
        if self.provider_state:
            interaction["providerState"] = self.provider_state
        interaction["request"] = to_json(self.request or {})
        interaction["response"] = to_json(self.response or {})
        return interaction

    def __repr__(self) -> str:
        return f"Interaction(description={self.description!r}, provider_state={self.provider_state!r})"


def _without_empty(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}
