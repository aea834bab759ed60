"""Tests for the request pipeline of AsyncNetworkClient and SyncNetworkClient."""

import asyncio
import json
from dataclasses import dataclass
from typing import List, Optional

import pytest

from NetConnect import (
    AsyncNetworkClient, BadResponseCode, BadResponseCodeAndError, BadResponseError, ClientConfig,
    ConnectionError, DecodingError, EncodingError, HTTPMethod, HTTPResponse, InvalidURLError, NoDataError,
    SyncNetworkClient, TransportCastError, check_ok_status,
)


@dataclass
class Item:
    itemId: int
    displayName: str


@dataclass
class NewItem:
    displayName: str
    parentId: Optional[int] = None


def make_client(transport, **kwargs):
    return AsyncNetworkClient(ClientConfig(transport=transport, **kwargs))


ITEM_BODY = {"item_id": 1, "display_name": "Widget"}


class TestCheckOkStatus:

    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_success_range_passes(self, status):
        check_ok_status(HTTPResponse(status_code=status, headers={}, body=b"garbage"))

    def test_structured_error_uses_body_values(self):
        response = HTTPResponse(status_code=404, headers={}, body=b'{"code": 4004, "message": "not found"}')
        with pytest.raises(BadResponseCodeAndError) as exc_info:
            check_ok_status(response)
        assert exc_info.value.code == 4004
        assert exc_info.value.message == "not found"
        assert exc_info.value.status_code == 404

    @pytest.mark.parametrize("body", [
        b"<html>Internal Server Error</html>",
        b"",
        b'{"error": "boom"}',
        b'{"code": "E1", "message": "boom"}',
        b'{"code": 1}',
    ])
    def test_unstructured_error_falls_back_to_status(self, body):
        response = HTTPResponse(status_code=500, headers={}, body=body)
        with pytest.raises(BadResponseCode) as exc_info:
            check_ok_status(response)
        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, BadResponseCodeAndError)

    @pytest.mark.parametrize("status", [199, 300, 301, 400])
    def test_outside_success_range_fails(self, status):
        with pytest.raises(BadResponseError):
            check_ok_status(HTTPResponse(status_code=status, headers={}, body=b""))


class TestAsyncNetworkClient:

    @pytest.mark.asyncio
    async def test_get_decodes_response(self, transport):
        transport.reply(200, ITEM_BODY)
        item = await make_client(transport).get("https://api.example.com/items/1", Item)
        assert item == Item(itemId=1, displayName="Widget")
        request = transport.last_request
        assert request.method is HTTPMethod.GET
        assert request.url == "https://api.example.com/items/1"
        assert request.body is None

    @pytest.mark.asyncio
    async def test_get_list(self, transport):
        transport.reply(200, [ITEM_BODY, {"item_id": 2, "display_name": "Gadget"}])
        items = await make_client(transport).get("https://api.example.com/items", List[Item])
        assert [item.itemId for item in items] == [1, 2]

    @pytest.mark.asyncio
    async def test_query_parameters_and_headers_are_applied(self, transport):
        transport.reply(200, ITEM_BODY)
        await make_client(transport).get(
            "https://api.example.com/search", Item,
            headers={"Accept": "application/json"},
            query_parameters={"q": "a b"},
        )
        request = transport.last_request
        assert request.url == "https://api.example.com/search?q=a%20b"
        assert request.header("accept") == "application/json"

    @pytest.mark.asyncio
    async def test_post_encodes_body_in_snake_case(self, transport):
        transport.reply(201, ITEM_BODY)
        item = await make_client(transport).post("https://api.example.com/items", Item,
                                                  body=NewItem(displayName="Widget", parentId=3))
        assert item.itemId == 1
        request = transport.last_request
        assert request.method is HTTPMethod.POST
        assert request.header("Content-Type") == "application/json"
        assert json.loads(request.body) == {"display_name": "Widget", "parent_id": 3}

    @pytest.mark.asyncio
    async def test_post_without_body(self, transport):
        transport.reply(200, ITEM_BODY)
        await make_client(transport).post("https://api.example.com/items/1/touch", Item)
        request = transport.last_request
        assert request.body is None
        assert request.header("Content-Type") == "application/json"

    @pytest.mark.asyncio
    async def test_post_caller_content_type_overrides_default(self, transport):
        transport.reply(200, ITEM_BODY)
        await make_client(transport).post("https://api.example.com/items", Item, body={"a": 1},
                                          headers={"Content-Type": "application/vnd.api+json"})
        assert transport.last_request.header("content-type") == "application/vnd.api+json"

    @pytest.mark.asyncio
    async def test_put_sends_body(self, transport):
        transport.reply(200, ITEM_BODY)
        await make_client(transport).put("https://api.example.com/items/1", Item, NewItem(displayName="W"))
        request = transport.last_request
        assert request.method is HTTPMethod.PUT
        assert json.loads(request.body) == {"display_name": "W"}

    @pytest.mark.asyncio
    async def test_delete(self, transport):
        transport.reply(200, ITEM_BODY)
        await make_client(transport).delete("https://api.example.com/items/1", Item,
                                            query_parameters={"force": "true"})
        request = transport.last_request
        assert request.method is HTTPMethod.DELETE
        assert request.url == "https://api.example.com/items/1?force=true"
        assert request.body is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("call", [
        lambda c: c.get("not a url", Item),
        lambda c: c.post("not a url", Item, body={"a": 1}),
        lambda c: c.put("not a url", Item, {"a": 1}),
        lambda c: c.delete("not a url", Item),
    ])
    async def test_invalid_url_never_dispatches(self, transport, call):
        with pytest.raises(InvalidURLError):
            await call(make_client(transport))
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_encoding_failure_never_dispatches(self, transport):
        with pytest.raises(EncodingError):
            await make_client(transport).post("https://api.example.com/items", Item, body={"x": object()})
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_structured_error_response(self, transport):
        transport.reply(404, {"code": 4004, "message": "not found"})
        with pytest.raises(BadResponseCodeAndError) as exc_info:
            await make_client(transport).get("https://api.example.com/items/9", Item)
        assert (exc_info.value.code, exc_info.value.message) == (4004, "not found")

    @pytest.mark.asyncio
    async def test_opaque_error_response(self, transport):
        transport.reply(500, b"upstream exploded")
        with pytest.raises(BadResponseCode) as exc_info:
            await make_client(transport).get("https://api.example.com/items/9", Item)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"", b"null", b'{"unexpected": true}'])
    async def test_missing_value_raises_no_data(self, transport, body):
        transport.reply(200, body)
        with pytest.raises(NoDataError):
            await make_client(transport).get("https://api.example.com/items/1", Item)

    @pytest.mark.asyncio
    async def test_optional_response_type_returns_none_for_null(self, transport):
        transport.reply(200, b"null").reply(200, ITEM_BODY)
        client = make_client(transport)
        assert await client.get("https://api.example.com/items/1", Optional[Item]) is None
        assert await client.get("https://api.example.com/items/1", Optional[Item]) == Item(1, "Widget")

    @pytest.mark.asyncio
    async def test_strict_decoding_propagates_decode_errors(self, transport):
        transport.reply(200, b"").reply(200, b"null")
        client = make_client(transport, optional_decode=False)
        with pytest.raises(DecodingError):
            await client.get("https://api.example.com/items/1", Item)
        assert await client.get("https://api.example.com/items/1", Optional[Item]) is None

    @pytest.mark.asyncio
    async def test_none_response_type_skips_decoding(self, transport):
        transport.reply(204, b"")
        assert await make_client(transport).delete("https://api.example.com/items/1", None) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", [
        {"status": 200},
        HTTPResponse(status_code="200", headers={}, body=b"{}"),
        HTTPResponse(status_code=200, headers={}, body="{}"),
        None,
    ])
    async def test_malformed_transport_result(self, transport, reply):
        transport.reply_raw(reply)
        with pytest.raises(TransportCastError):
            await make_client(transport).get("https://api.example.com/items/1", Item)

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self, transport):
        transport.reply_raw(ConnectionError("refused"))
        with pytest.raises(ConnectionError):
            await make_client(transport).get("https://api.example.com/items/1", Item)

    @pytest.mark.asyncio
    async def test_timeout_comes_from_config(self, transport):
        transport.reply(200, ITEM_BODY)
        await make_client(transport, timeout=2.5).get("https://api.example.com/items/1", Item)
        assert transport.last_request.timeout == 2.5

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_client(self, transport):
        for i in range(5):
            transport.reply(200, {"item_id": i, "display_name": f"item-{i}"})
        client = make_client(transport)
        items = await asyncio.gather(*(client.get(f"https://api.example.com/items/{i}", Item) for i in range(5)))
        assert sorted(item.itemId for item in items) == list(range(5))

    @pytest.mark.asyncio
    async def test_injected_transport_is_not_closed(self, transport):
        async with make_client(transport):
            pass
        assert transport.closed is False

    @pytest.mark.asyncio
    async def test_owned_transport_is_closed(self, transport):
        async with AsyncNetworkClient(ClientConfig(transport=transport), owns_transport=True):
            pass
        assert transport.closed is True


class TestSyncNetworkClient:

    def test_get_outside_event_loop(self, transport):
        transport.reply(200, ITEM_BODY)
        with SyncNetworkClient(ClientConfig(transport=transport)) as client:
            assert client.get("https://api.example.com/items/1", Item) == Item(1, "Widget")

    def test_errors_surface_synchronously(self, transport):
        transport.reply(404, {"code": 4004, "message": "not found"})
        client = SyncNetworkClient(ClientConfig(transport=transport))
        with pytest.raises(BadResponseCodeAndError):
            client.put("https://api.example.com/items/1", Item, {"display_name": "x"})

    @pytest.mark.asyncio
    async def test_usable_from_inside_a_running_loop(self, transport):
        transport.reply(200, ITEM_BODY)
        client = SyncNetworkClient(ClientConfig(transport=transport))
        assert client.delete("https://api.example.com/items/1", Item).displayName == "Widget"
