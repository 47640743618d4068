"""
API client and store tests against an in-process httpx.MockTransport.

Verifies:
- Envelope unwrapping and ApiError fields
- Bearer token handling across login/logout
- Stores roll back and record the error on failed mutations
"""

import asyncio
import json

import httpx
import pytest

from fabricstore.client import ApiClient, ApiError, RollStore


ROLL = {"id": "r1", "barcode": "RC100", "catalogId": "c1", "status": "in_stock", "lengthMeters": 50}


def _ok(data, status=200):
    return httpx.Response(status, json={"success": True, "data": data})


def _fail(code, status, message="nope", details=None):
    error = {"message": message, "code": code, "statusCode": status}
    if details:
        error["details"] = details
    return httpx.Response(status, json={"success": False, "error": error})


def _client(handler, **kwargs):
    return ApiClient("http://inventory.test", transport=httpx.MockTransport(handler), **kwargs)


def test_unwraps_data_and_sends_params():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        seen["auth"] = request.headers.get("Authorization")
        return _ok([ROLL])

    async def scenario():
        async with _client(handler, token="abc") as api:
            return await api.rolls.get_all({"status": "in_stock", "color": "", "catalog": None})

    assert asyncio.run(scenario()) == [ROLL]
    assert seen["params"] == {"status": "in_stock"}
    assert seen["auth"] == "Bearer abc"


def test_error_envelope_becomes_api_error():
    def handler(request):
        return _fail("INVALID_STATUS_TRANSITION", 422, "Cannot change", {"from": "sold", "to": "in_stock"})

    async def scenario():
        async with _client(handler) as api:
            await api.rolls.update("r1", {"status": "in_stock"})

    with pytest.raises(ApiError) as exc:
        asyncio.run(scenario())
    assert exc.value.code == "INVALID_STATUS_TRANSITION"
    assert exc.value.status_code == 422
    assert exc.value.details == {"from": "sold", "to": "in_stock"}


def test_network_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async def scenario():
        async with _client(handler) as api:
            await api.catalogs.materials()

    with pytest.raises(ApiError) as exc:
        asyncio.run(scenario())
    assert exc.value.code == "NETWORK_ERROR"
    assert exc.value.status_code == 0


def test_invalid_json():
    def handler(request):
        return httpx.Response(502, text="<html>bad gateway</html>")

    async def scenario():
        async with _client(handler) as api:
            await api.rolls.summary()

    with pytest.raises(ApiError) as exc:
        asyncio.run(scenario())
    assert exc.value.code == "INVALID_RESPONSE"
    assert exc.value.status_code == 502


def test_login_and_logout_manage_token():
    calls = []

    def handler(request):
        calls.append((request.url.path, request.headers.get("Authorization")))
        if request.url.path == "/api/auth/login":
            assert json.loads(request.content) == {"email": "a@b.test", "password": "Secret123"}
            return _ok({"user": {"id": "u1"}, "token": "tok"})
        return _ok(None)

    async def scenario():
        async with _client(handler) as api:
            await api.login("a@b.test", "Secret123")
            assert api.token == "tok"
            await api.logout()
            return api.token

    assert asyncio.run(scenario()) is None
    assert calls == [("/api/auth/login", None), ("/api/auth/logout", "Bearer tok")]


class TestRollStore:

    def test_failed_update_rolls_back_and_sets_error(self):
        def handler(request):
            if request.method == "GET":
                return _ok([ROLL])
            return _fail("CANNOT_MODIFY_SOLD_ROLL", 422)

        async def scenario():
            async with _client(handler) as api:
                store = RollStore(api.rolls)
                await store.fetch_all()
                with pytest.raises(ApiError):
                    await store.update("r1", {"lengthMeters": 10})
                return store

        store = asyncio.run(scenario())
        assert store.get("r1") == ROLL
        assert store.error.code == "CANNOT_MODIFY_SOLD_ROLL"
        assert store.loading is False

    def test_local_barcode_precheck(self):
        requests = []

        def handler(request):
            requests.append(request.method)
            return _ok([ROLL])

        async def scenario():
            async with _client(handler) as api:
                store = RollStore(api.rolls)
                await store.fetch_all()
                with pytest.raises(ApiError) as exc:
                    await store.create({"barcode": "RC100", "catalogId": "c1"})
                return store, exc.value

        store, error = asyncio.run(scenario())
        assert error.code == "CONFLICT"
        assert requests == ["GET"]
        assert len(store.items) == 1

    def test_create_and_stats(self):
        created = {**ROLL, "id": "r2", "barcode": "RC200", "status": "reserved"}

        def handler(request):
            if request.method == "GET":
                return _ok([ROLL])
            return _ok(created, 201)

        async def scenario():
            async with _client(handler) as api:
                store = RollStore(api.rolls)
                await store.fetch_all()
                await store.create({"barcode": "RC200", "catalogId": "c1", "status": "reserved"})
                return store

        store = asyncio.run(scenario())
        assert [r["id"] for r in store.items] == ["r2", "r1"]
        stats = store.stats()
        assert stats["total"] == 2
        assert stats["byStatus"]["reserved"] == 1
        assert stats["byCatalog"] == {"c1": 2}
