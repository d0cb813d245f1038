"""Tests for the HTTP helper and the GraphQL client."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from common.http_client import new_session, safe_post
from registry.errors import GraphQLError, RegistryConnectionError, RegistryError
from registry.graphql import GraphQLClient, build_endpoint_url, raise_for_payload_errors


def _response(status_code=200, body=None, json_error=False):
    res = MagicMock()
    res.status_code = status_code
    if json_error:
        res.json.side_effect = ValueError("no json")
    else:
        res.json.return_value = body
    return res


class TestSafePost:
    """Transport error handling."""

    def test_returns_response(self):
        session = MagicMock()
        session.post.return_value = _response(200, {"data": {}})

        res = safe_post(session, "https://example.com/graphql", context="graphql", payload={"query": "q"})

        assert res.status_code == 200
        _, kwargs = session.post.call_args
        assert kwargs["json"] == {"query": "q"}
        assert kwargs["timeout"] > 0

    def test_timeout_raises_connection_error(self):
        session = MagicMock()
        session.post.side_effect = requests.Timeout("slow")

        with pytest.raises(RegistryConnectionError):
            safe_post(session, "https://example.com/graphql", context="graphql")

    def test_connection_failure_raises_connection_error(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(RegistryConnectionError, match="refused"):
            safe_post(session, "https://example.com/graphql", context="graphql")

    def test_new_session_sets_token_header(self):
        session = new_session("secret")

        assert session.headers["Authorization"] == "secret"
        assert session.headers["Content-Type"] == "application/json"

    def test_new_session_without_token(self):
        assert "Authorization" not in new_session(None).headers


class TestBuildEndpointUrl:
    """Endpoint URL construction."""

    def test_default_endpoint(self):
        assert build_endpoint_url("https://circleci.com") == "https://circleci.com/graphql-unstable"

    def test_trailing_slash_and_missing_scheme(self):
        assert build_endpoint_url("circleci.example.com/", "/graphql") == "https://circleci.example.com/graphql"


class TestGraphQLClientRun:
    """Decoding of GraphQL responses."""

    @patch("registry.graphql.http_client.safe_post")
    def test_returns_data(self, mock_post):
        mock_post.return_value = _response(200, {"data": {"orb": {"id": "abc"}}})
        client = GraphQLClient("https://circleci.com", "token", session=MagicMock())

        data = client.run("query", {"name": "ns/a"})

        assert data == {"orb": {"id": "abc"}}
        _, kwargs = mock_post.call_args
        assert kwargs["payload"] == {"query": "query", "variables": {"name": "ns/a"}}

    @patch("registry.graphql.http_client.safe_post")
    def test_null_data_becomes_empty_dict(self, mock_post):
        mock_post.return_value = _response(200, {"data": None})
        client = GraphQLClient("https://circleci.com", session=MagicMock())

        assert client.run("query") == {}

    @patch("registry.graphql.http_client.safe_post")
    def test_non_200_raises(self, mock_post):
        mock_post.return_value = _response(502, None)
        client = GraphQLClient("https://circleci.com", session=MagicMock())

        with pytest.raises(GraphQLError) as excinfo:
            client.run("query")
        assert excinfo.value.status_code == 502

    @patch("registry.graphql.http_client.safe_post")
    def test_non_json_body_raises(self, mock_post):
        mock_post.return_value = _response(200, json_error=True)
        client = GraphQLClient("https://circleci.com", session=MagicMock())

        with pytest.raises(GraphQLError):
            client.run("query")

    @patch("registry.graphql.http_client.safe_post")
    def test_errors_array_raises(self, mock_post):
        mock_post.return_value = _response(200, {"data": None, "errors": [{"message": "boom"}, {"message": "bang"}]})
        client = GraphQLClient("https://circleci.com", session=MagicMock())

        with pytest.raises(GraphQLError) as excinfo:
            client.run("query")
        assert excinfo.value.messages == ["boom", "bang"]
        assert isinstance(excinfo.value, RegistryError)


class TestPayloadErrors:
    """Mutation payload error reporting."""

    def test_payload_errors_raise(self):
        with pytest.raises(GraphQLError, match="could not do it: nope"):
            raise_for_payload_errors({"errors": [{"message": "nope", "type": "X"}]}, "could not do it")

    @pytest.mark.parametrize("payload", [None, {}, {"errors": []}, {"errors": None}])
    def test_no_errors(self, payload):
        raise_for_payload_errors(payload, "fine")
