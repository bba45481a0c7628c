"""Tests for the Kagi search plugin."""

import asyncio
import inspect
from unittest.mock import Mock, patch

import pytest

from ...types import ToolSchema
from ..credentials import ENV_KAGI_API_KEY
from ..plugin import (
    KAGI_SEARCH_URL,
    NO_API_KEY_MESSAGE,
    KagiSearchPlugin,
    create_plugin,
    resolve_limit,
)

REQUESTS = "kagi_search.plugins.kagi.plugin.requests"

META = {"id": "req-1", "node": "us-east4", "ms": 123, "api_balance": 4.5}


def make_response(status=200, body=None, text="", reason="OK"):
    response = Mock()
    response.status_code = status
    response.ok = 200 <= status < 400
    response.json.return_value = body
    response.text = text
    response.reason = reason
    return response


def run(plugin, args):
    return asyncio.run(plugin._execute(args))


def text_of(result):
    assert list(result) == ["content"]
    assert len(result["content"]) == 1
    assert result["content"][0]["type"] == "text"
    return result["content"][0]["text"]


@pytest.fixture
def plugin():
    plugin = KagiSearchPlugin()
    plugin.initialize({"apiKey": "test-key"})
    return plugin


class TestKagiPluginInitialization:

    def test_create_plugin_factory(self):
        assert isinstance(create_plugin(), KagiSearchPlugin)

    def test_plugin_name(self):
        assert KagiSearchPlugin().name == "kagi-search"

    def test_plugin_metadata(self):
        assert KagiSearchPlugin.display_name == "Kagi Search"
        assert "no AI synthesis" in KagiSearchPlugin.description

    def test_initialize_without_config(self):
        plugin = KagiSearchPlugin()
        plugin.initialize()
        assert plugin._initialized is True
        assert plugin._config == {}

    def test_initialize_copies_config(self):
        config = {"apiKey": "k", "limit": 7}
        plugin = KagiSearchPlugin()
        plugin.initialize(config)
        config["limit"] = 1
        assert plugin._config == {"apiKey": "k", "limit": 7}

    def test_shutdown(self, plugin):
        plugin.shutdown()
        assert plugin._initialized is False
        assert plugin._config == {}


class TestKagiPluginToolSchema:

    def test_single_schema(self):
        schemas = KagiSearchPlugin().get_tool_schemas()
        assert len(schemas) == 1
        assert isinstance(schemas[0], ToolSchema)
        assert schemas[0].name == "kagi_search"

    def test_parameters(self):
        params = KagiSearchPlugin().get_tool_schemas()[0].parameters
        assert params["type"] == "object"
        assert params["properties"]["query"]["type"] == "string"
        assert params["properties"]["limit"]["type"] == "number"
        assert params["required"] == ["query"]

    def test_executor_is_coroutine_function(self):
        executors = KagiSearchPlugin().get_executors()
        assert list(executors) == ["kagi_search"]
        assert inspect.iscoroutinefunction(executors["kagi_search"])

    def test_auto_approved(self):
        assert KagiSearchPlugin().get_auto_approved_tools() == ["kagi_search"]

    def test_system_instructions_mention_tool(self):
        assert "kagi_search" in KagiSearchPlugin().get_system_instructions()


class TestResolveLimit:

    @pytest.mark.parametrize("value,expected", [
        (0, 1),
        (-5, 1),
        (21, 20),
        (1000, 20),
        (1, 1),
        (20, 20),
        (7, 7),
    ])
    def test_clamped(self, value, expected):
        assert resolve_limit(value) == expected

    def test_default(self):
        assert resolve_limit() == 5

    def test_config_default(self):
        assert resolve_limit(None, 12) == 12

    def test_config_default_is_clamped(self):
        assert resolve_limit(None, 50) == 20

    def test_explicit_beats_config(self):
        assert resolve_limit(3, 12) == 3

    def test_numeric_string(self):
        assert resolve_limit("7") == 7

    def test_non_numeric_string_uses_default(self):
        assert resolve_limit("abc") == 5
        assert resolve_limit("abc", 8) == 8

    def test_fraction_truncated(self):
        assert resolve_limit(7.9) == 7
        assert resolve_limit(0.5) == 1

    def test_bool_is_not_a_number(self):
        assert resolve_limit(True) == 5


class TestKagiPluginMissingKey:

    def test_no_key_message(self, monkeypatch, tmp_path):
        monkeypatch.delenv(ENV_KAGI_API_KEY, raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        plugin = KagiSearchPlugin()
        plugin.initialize({})

        with patch(REQUESTS) as mock_requests:
            result = run(plugin, {"query": "anything"})

        assert text_of(result) == NO_API_KEY_MESSAGE
        mock_requests.get.assert_not_called()

    def test_key_resolved_on_every_call(self, monkeypatch, tmp_path):
        monkeypatch.delenv(ENV_KAGI_API_KEY, raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        plugin = KagiSearchPlugin()
        plugin.initialize({})

        with patch(REQUESTS) as mock_requests:
            mock_requests.get.return_value = make_response(body={"meta": META, "data": []})

            assert text_of(run(plugin, {"query": "q"})) == NO_API_KEY_MESSAGE

            monkeypatch.setenv(ENV_KAGI_API_KEY, "late-key")
            assert text_of(run(plugin, {"query": "q"})) == 'No results found for "q"'

        headers = mock_requests.get.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bot late-key"


class TestKagiPluginRequest:

    @patch(REQUESTS)
    def test_request_shape(self, mock_requests, plugin):
        mock_requests.get.return_value = make_response(body={"meta": META, "data": []})

        run(plugin, {"query": "rust ownership"})

        args, kwargs = mock_requests.get.call_args
        assert args == (KAGI_SEARCH_URL,)
        assert kwargs["params"] == {"q": "rust ownership", "limit": "5"}
        assert kwargs["headers"] == {
            "Authorization": "Bot test-key",
            "Accept": "application/json",
        }
        assert kwargs["timeout"] is None

    @patch(REQUESTS)
    def test_limit_clamped_in_request(self, mock_requests, plugin):
        mock_requests.get.return_value = make_response(body={"meta": META, "data": []})

        run(plugin, {"query": "q", "limit": 1000})

        assert mock_requests.get.call_args.kwargs["params"]["limit"] == "20"

    @patch(REQUESTS)
    def test_config_limit_and_timeout(self, mock_requests):
        mock_requests.get.return_value = make_response(body={"meta": META, "data": []})
        plugin = KagiSearchPlugin()
        plugin.initialize({"apiKey": "k", "limit": 10, "timeout": 15})

        run(plugin, {"query": "q"})

        kwargs = mock_requests.get.call_args.kwargs
        assert kwargs["params"]["limit"] == "10"
        assert kwargs["timeout"] == 15


class TestKagiPluginResults:

    @patch(REQUESTS)
    def test_end_to_end_two_organic_one_related(self, mock_requests, plugin):
        mock_requests.get.return_value = make_response(body={
            "meta": META,
            "data": [
                {
                    "t": 0,
                    "url": "https://doc.rust-lang.org/book/ch04-01-what-is-ownership.html",
                    "title": "What is Ownership?",
                    "snippet": "Ownership is a set of rules.",
                    "published": "2023-05-01T00:00:00Z",
                },
                {"t": 1, "list": ["rust borrowing", "rust lifetimes"]},
                {
                    "t": 0,
                    "url": "https://blog.example.com/ownership",
                    "title": "Ownership explained",
                },
            ],
        })

        text = text_of(run(plugin, {"query": "rust ownership"}))

        assert text == (
            "1. **What is Ownership?**\n"
            "   https://doc.rust-lang.org/book/ch04-01-what-is-ownership.html\n"
            "   Ownership is a set of rules.\n"
            "   Published: 2023-05-01T00:00:00Z\n"
            "\n"
            "2. **Ownership explained**\n"
            "   https://blog.example.com/ownership\n"
            "\n"
            "---\n"
            "_Kagi Search · 2 results · 123ms · balance: $4.50_"
        )
        assert "rust borrowing" not in text

    @patch(REQUESTS)
    def test_only_organic_with_url_in_order(self, mock_requests, plugin):
        mock_requests.get.return_value = make_response(body={
            "meta": META,
            "data": [
                {"t": 0, "title": "no url"},
                {"t": 0, "url": "https://b.example", "title": "B"},
                {"t": 1, "url": "https://related.example", "title": "R"},
                {"t": 0, "url": "https://a.example", "title": "A"},
            ],
        })

        text = text_of(run(plugin, {"query": "q"}))

        assert text.index("1. **B**") < text.index("2. **A**")
        assert "no url" not in text
        assert "related.example" not in text
        assert "2 results" in text

    @patch(REQUESTS)
    def test_no_results(self, mock_requests, plugin):
        mock_requests.get.return_value = make_response(body={
            "meta": META,
            "data": [{"t": 1, "list": ["something"]}],
        })

        text = text_of(run(plugin, {"query": "zzyzx obscure"}))

        assert text == 'No results found for "zzyzx obscure"'
        assert "---" not in text

    @patch(REQUESTS)
    def test_error_list_short_circuits(self, mock_requests, plugin):
        mock_requests.get.return_value = make_response(body={
            "meta": META,
            "data": [{"t": 0, "url": "https://a.example", "title": "A"}],
            "error": [{"code": 1, "msg": "Insufficient credit"}, {"code": 2, "msg": "Try later"}],
        })

        text = text_of(run(plugin, {"query": "q"}))

        assert text == "Kagi API error: Insufficient credit; Try later"

    @patch(REQUESTS)
    def test_empty_error_list_is_not_an_error(self, mock_requests, plugin):
        mock_requests.get.return_value = make_response(body={
            "meta": META,
            "data": [{"t": 0, "url": "https://a.example", "title": "A"}],
            "error": [],
        })

        text = text_of(run(plugin, {"query": "q"}))

        assert text.startswith("1. **A**")


class TestKagiPluginFailures:

    @patch(REQUESTS)
    def test_http_401_includes_body(self, mock_requests, plugin):
        mock_requests.get.return_value = make_response(
            status=401,
            text='{"error":[{"code":1,"msg":"Unauthorized"}]}',
            reason="Unauthorized",
        )

        text = text_of(run(plugin, {"query": "q"}))

        assert text == 'Kagi API error 401: {"error":[{"code":1,"msg":"Unauthorized"}]}'

    @patch(REQUESTS)
    def test_http_error_without_body_uses_reason(self, mock_requests, plugin):
        mock_requests.get.return_value = make_response(
            status=503, text="", reason="Service Unavailable",
        )

        text = text_of(run(plugin, {"query": "q"}))

        assert text == "Kagi API error 503: Service Unavailable"

    @patch(REQUESTS)
    def test_network_failure(self, mock_requests, plugin):
        mock_requests.get.side_effect = ConnectionError("connection refused")

        text = text_of(run(plugin, {"query": "q"}))

        assert text == "Kagi search failed: connection refused"

    @patch(REQUESTS)
    def test_malformed_json(self, mock_requests, plugin):
        response = make_response()
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
        mock_requests.get.return_value = response

        text = text_of(run(plugin, {"query": "q"}))

        assert text.startswith("Kagi search failed: Expecting value")

    @patch(REQUESTS)
    def test_non_object_body(self, mock_requests, plugin):
        mock_requests.get.return_value = make_response(body=[1, 2, 3])

        text = text_of(run(plugin, {"query": "q"}))

        assert text.startswith("Kagi search failed:")
