"""
Unit tests for the Webflow API client.

Run: pytest tests/unit/test_webflow_client.py -v
"""

import pytest
import requests
from unittest.mock import MagicMock

from exceptions import (
    InvalidCredentialError,
    MissingCredentialError,
    WebflowAPIError,
)
from integrations.webflow import WebflowClient, is_valid_token, validate_token
from tests.conftest import TEST_TOKEN


def make_response(status: int = 200, payload=None, text: str = "") -> MagicMock:
    """Fake requests.Response."""
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    if payload is None:
        response.content = text.encode()
        response.text = text
        response.json.side_effect = ValueError("no json")
    else:
        response.content = b"{...}"
        response.json.return_value = payload
    return response


@pytest.fixture
def http() -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    session.request.return_value = make_response(payload={})
    return session


@pytest.fixture
def client(http) -> WebflowClient:
    return WebflowClient(TEST_TOKEN, base_url="https://api.test/v2", http=http)


class TestTokenValidation:
    """Tests for validate_token() and is_valid_token()"""

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_missing_token(self, token):
        with pytest.raises(MissingCredentialError):
            validate_token(token)

    def test_short_token_invalid(self):
        with pytest.raises(InvalidCredentialError):
            validate_token("too-short")

    def test_valid_token_stripped(self):
        assert validate_token(f"  {TEST_TOKEN}  ") == TEST_TOKEN

    def test_is_valid_token(self):
        assert is_valid_token(TEST_TOKEN)
        assert not is_valid_token("abc")
        assert not is_valid_token(None)

    def test_client_rejects_bad_token_without_calling(self, http):
        with pytest.raises(InvalidCredentialError):
            WebflowClient("short", http=http)

        http.request.assert_not_called()


class TestRequest:
    """Tests for WebflowClient.request()"""

    def test_sets_auth_headers(self, client, http):
        assert http.headers["Authorization"] == f"Bearer {TEST_TOKEN}"
        assert http.headers["accept-version"] == "2.0.0"

    def test_get_sends_no_body(self, client, http):
        client.request("/sites", body={"ignored": True})

        _, kwargs = http.request.call_args
        assert http.request.call_args[0] == ("GET", "https://api.test/v2/sites")
        assert kwargs["json"] is None

    def test_post_sends_body(self, client, http):
        client.request("/x", method="post", body={"a": 1})

        assert http.request.call_args[0][0] == "POST"
        assert http.request.call_args[1]["json"] == {"a": 1}

    def test_error_uses_message_field(self, client, http):
        http.request.return_value = make_response(400, {"message": "Validation Error"})

        with pytest.raises(WebflowAPIError) as exc_info:
            client.request("/x")

        assert exc_info.value.message == "Validation Error"
        assert exc_info.value.upstream_status == 400
        assert exc_info.value.status_code == 502

    def test_error_falls_back_to_error_field(self, client, http):
        http.request.return_value = make_response(401, {"error": "not_authorized"})

        with pytest.raises(WebflowAPIError) as exc_info:
            client.request("/x")

        assert exc_info.value.message == "not_authorized"

    def test_error_without_json_body(self, client, http):
        http.request.return_value = make_response(503, text="<html>down</html>")

        with pytest.raises(WebflowAPIError) as exc_info:
            client.request("/x")

        assert exc_info.value.message == "API Error: 503"

    def test_network_failure_wrapped(self, client, http):
        http.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(WebflowAPIError) as exc_info:
            client.request("/x")

        assert exc_info.value.upstream_status is None
        assert "refused" in exc_info.value.message

    def test_empty_body_returns_empty_dict(self, client, http):
        http.request.return_value = make_response(204, text="")

        assert client.request("/x", method="DELETE") == {}


class TestEndpoints:
    """Tests for the endpoint helpers"""

    def test_get_sites_unwraps_list(self, client, http):
        http.request.return_value = make_response(payload={"sites": [{"id": "s1"}]})

        assert client.get_sites() == [{"id": "s1"}]

    def test_get_collections(self, client, http):
        http.request.return_value = make_response(payload={"collections": [{"id": "c1"}]})

        assert client.get_collections("s1") == [{"id": "c1"}]
        assert http.request.call_args[0][1].endswith("/sites/s1/collections")

    def test_list_items_params(self, client, http):
        http.request.return_value = make_response(payload={"items": [{"id": "i1"}]})

        items = client.list_items("c1", limit=100, offset=200)

        assert items == [{"id": "i1"}]
        assert http.request.call_args[1]["params"] == {"limit": 100, "offset": 200}

    def test_list_items_first_page_omits_offset(self, client, http):
        http.request.return_value = make_response(payload={"items": []})

        client.list_items("c1")

        assert http.request.call_args[1]["params"] == {"limit": 100}

    def test_create_item_live(self, client, http):
        client.create_item("c1", {"name": "A"})

        method, url = http.request.call_args[0]
        assert (method, url) == ("POST", "https://api.test/v2/collections/c1/items/live")
        assert http.request.call_args[1]["json"] == {"fieldData": {"name": "A"}}

    def test_create_item_draft(self, client, http):
        client.create_item("c1", {"name": "A"}, live=False)

        assert http.request.call_args[0][1] == "https://api.test/v2/collections/c1/items"

    def test_update_item(self, client, http):
        client.update_item("c1", "i1", {"name": "B"})

        method, url = http.request.call_args[0]
        assert (method, url) == ("PATCH", "https://api.test/v2/collections/c1/items/i1/live")
        assert http.request.call_args[1]["json"] == {"fieldData": {"name": "B"}}

    def test_get_item(self, client, http):
        http.request.return_value = make_response(payload={"id": "i1", "fieldData": {"slug": "a"}})

        item = client.get_item("c1", "i1")

        assert item["fieldData"] == {"slug": "a"}
        assert http.request.call_args[0] == ("GET", "https://api.test/v2/collections/c1/items/i1")
        assert http.request.call_args[1]["json"] is None

    def test_get_unknown_item_raises(self, client, http):
        http.request.return_value = make_response(404, payload={"message": "Requested resource not found"})

        with pytest.raises(WebflowAPIError) as exc_info:
            client.get_item("c1", "missing")

        assert exc_info.value.upstream_status == 404

    def test_delete_item(self, client, http):
        http.request.return_value = make_response(204, text="")

        assert client.delete_item("c1", "i1") == {}
        assert http.request.call_args[0] == ("DELETE", "https://api.test/v2/collections/c1/items/i1")

    def test_publish_site(self, client, http):
        client.publish_site("s1", {"publishToWebflowSubdomain": True})

        assert http.request.call_args[0] == ("POST", "https://api.test/v2/sites/s1/publish")
