import json

import pytest
from pydantic import ValidationError

from pact_consumer.core.interaction import Interaction
from pact_consumer.core.matchers import EachLike, Like, Term
from pact_consumer.core.pact import Pact, Pacticipant, pact_file_name


def account_interaction(description="a request for an account"):
    return (Interaction()
            .given("an account exists")
            .upon_receiving(description)
            .with_request(
                "GET",
                "/accounts/1",
                query="include=roles",
                headers={"Accept": "application/json"},
            )
            .will_respond_with(
                200,
                headers={"Content-Type": "application/json"},
                body={
                    "id": Like(12345),
                    "status": Term(r"^(active|closed)$", "active"),
                    "roles": EachLike({"name": Like("admin")}),
                },
            ))


def make_pact(*interactions):
    return Pact(
        consumer=Pacticipant(name="Mobile App"),
        provider=Pacticipant(name="Auth Service"),
        interactions=list(interactions),
    )


class TestInteraction:

    def test_builder_methods_chain(self):
        interaction = Interaction()
        assert interaction.given("state") is interaction
        assert interaction.upon_receiving("description") is interaction
        assert interaction.with_request("GET", "/") is interaction
        assert interaction.will_respond_with(200) is interaction

    def test_as_dict_renders_request_and_response(self):
        rendered = account_interaction().as_dict()

        assert rendered["description"] == "a request for an account"
        assert rendered["providerState"] == "an account exists"
        assert rendered["request"] == {
            "method": "get",
            "path": "/accounts/1",
            "query": "include=roles",
            "headers": {"Accept": "application/json"},
        }
        assert rendered["response"]["status"] == 200
        assert rendered["response"]["body"]["id"] == {"json_class": "Pact::SomethingLike", "contents": 12345}
        assert rendered["response"]["body"]["status"]["json_class"] == "Pact::Term"
        assert rendered["response"]["body"]["roles"]["json_class"] == "Pact::ArrayLike"

    def test_as_dict_omits_missing_provider_state_and_empty_fields(self):
        rendered = (Interaction()
                    .upon_receiving("a health check")
                    .with_request("GET", "/health")
                    .will_respond_with(204)
                    .as_dict())

        assert "providerState" not in rendered
        assert rendered["request"] == {"method": "get", "path": "/health"}
        assert rendered["response"] == {"status": 204}

    def test_matcher_in_path_is_rendered(self):
        rendered = (Interaction()
                    .upon_receiving("a request by id")
                    .with_request("GET", Term(r"/accounts/\d+", "/accounts/1"))
                    .will_respond_with(200)
                    .as_dict())

        assert rendered["request"]["path"]["generate"] == "/accounts/1"

    def test_is_complete(self):
        interaction = Interaction().upon_receiving("a request")
        assert not interaction.is_complete
        interaction.with_request("GET", "/")
        assert not interaction.is_complete
        interaction.will_respond_with(200)
        assert interaction.is_complete


class TestPact:

    def test_data_contains_identity_interactions_and_metadata(self):
        data = make_pact(account_interaction()).data()

        assert data["consumer"] == {"name": "Mobile App"}
        assert data["provider"] == {"name": "Auth Service"}
        assert data["metadata"] == {"pactSpecification": {"version": "2.0.0"}}
        assert [i["description"] for i in data["interactions"]] == ["a request for an account"]

    def test_data_is_json_serializable(self):
        data = make_pact(account_interaction()).data()
        assert json.loads(json.dumps(data)) == data

    def test_data_keeps_interaction_order(self):
        data = make_pact(
            account_interaction("first"),
            account_interaction("second"),
            account_interaction("third"),
        ).data()

        assert [i["description"] for i in data["interactions"]] == ["first", "second", "third"]

    def test_data_is_none_without_interactions(self):
        assert make_pact().data() is None

    def test_data_is_none_with_incomplete_interaction(self):
        incomplete = Interaction().upon_receiving("no response yet").with_request("GET", "/")
        assert make_pact(account_interaction(), incomplete).data() is None

    def test_file_name(self):
        assert make_pact().file_name == "mobile_app-auth_service.json"
        assert pact_file_name("mobile-app", "auth-service") == "mobile-app-auth-service.json"

    def test_pacticipant_requires_name(self):
        with pytest.raises(ValidationError):
            Pacticipant(name="")
