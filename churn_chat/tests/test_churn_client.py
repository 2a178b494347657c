import json

import httpx
import pytest

from churn_chat.domain.exceptions import ApplicationError, RequestTimeoutError, TransportError, ValidationError
from churn_chat.domain.models import TurnRequest
from churn_chat.providers.churn_client import ChurnApiClient


class SettingsStub:
    chat_endpoint_url = "https://example.test/chat"
    http_timeout = 1.0


def make_client_class(payload=None, status_code=200, raise_exc=None, body=None, captured=None):
    class Resp:
        def __init__(self):
            self.status_code = status_code

        def json(self):
            if body is not None:
                return json.loads(body)
            return payload

    class Client:
        def __init__(self, *a, **kw):
            if captured is not None:
                captured["client_kwargs"] = kw

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def post(self, url, **kw):
            if captured is not None:
                captured["url"] = url
                captured["json"] = kw.get("json")
            if raise_exc is not None:
                raise raise_exc
            return Resp()

    return Client


@pytest.mark.asyncio
async def test_success_payload_and_request_body(monkeypatch):
    captured = {}
    monkeypatch.setattr(
        "httpx.AsyncClient",
        make_client_class(
            payload={"status": "success", "response": "🎯 **Prediction:** Churn", "session_id": "abc123"},
            captured=captured,
        ),
    )
    client = ChurnApiClient(SettingsStub())
    res = await client.chat(TurnRequest(message="tenure: 12", session_id=None))
    assert res.response_text == "🎯 **Prediction:** Churn"
    assert res.session_id == "abc123"
    assert captured["url"] == "https://example.test/chat"
    assert captured["json"] == {"message": "tenure: 12", "session_id": None}
    assert captured["client_kwargs"]["timeout"] == 1.0


@pytest.mark.asyncio
async def test_success_without_session_id(monkeypatch):
    monkeypatch.setattr(
        "httpx.AsyncClient",
        make_client_class(payload={"status": "success", "response": "ok", "session_id": "  "}),
    )
    res = await ChurnApiClient(SettingsStub()).chat(TurnRequest(message="hi", session_id="s1"))
    assert res.session_id is None


@pytest.mark.asyncio
async def test_application_error_carries_message(monkeypatch):
    monkeypatch.setattr(
        "httpx.AsyncClient",
        make_client_class(payload={"status": "error", "message": "Model not loaded"}, status_code=500),
    )
    with pytest.raises(ApplicationError) as exc:
        await ChurnApiClient(SettingsStub()).chat(TurnRequest(message="hi"))
    assert exc.value.message == "Model not loaded"
    assert exc.value.http_status == 500


@pytest.mark.asyncio
async def test_application_error_falls_back_to_detail(monkeypatch):
    monkeypatch.setattr(
        "httpx.AsyncClient",
        make_client_class(payload={"detail": "Not Found"}, status_code=404),
    )
    with pytest.raises(ApplicationError) as exc:
        await ChurnApiClient(SettingsStub()).chat(TurnRequest(message="hi"))
    assert exc.value.message == "Not Found"


@pytest.mark.asyncio
async def test_non_json_body_is_transport_error(monkeypatch):
    monkeypatch.setattr("httpx.AsyncClient", make_client_class(body="<html>502</html>", status_code=502))
    with pytest.raises(TransportError) as exc:
        await ChurnApiClient(SettingsStub()).chat(TurnRequest(message="hi"))
    assert exc.value.code == "MALFORMED_RESPONSE"


@pytest.mark.asyncio
async def test_success_without_text_is_malformed(monkeypatch):
    monkeypatch.setattr("httpx.AsyncClient", make_client_class(payload={"status": "success"}))
    with pytest.raises(TransportError) as exc:
        await ChurnApiClient(SettingsStub()).chat(TurnRequest(message="hi"))
    assert exc.value.code == "MALFORMED_RESPONSE"


@pytest.mark.asyncio
async def test_network_error(monkeypatch):
    monkeypatch.setattr("httpx.AsyncClient", make_client_class(raise_exc=httpx.ConnectError("refused")))
    with pytest.raises(TransportError) as exc:
        await ChurnApiClient(SettingsStub()).chat(TurnRequest(message="hi"))
    assert exc.value.code == "NETWORK_ERROR"
    assert not isinstance(exc.value, RequestTimeoutError)


@pytest.mark.asyncio
async def test_timeout(monkeypatch):
    monkeypatch.setattr("httpx.AsyncClient", make_client_class(raise_exc=httpx.ReadTimeout("slow")))
    with pytest.raises(RequestTimeoutError):
        await ChurnApiClient(SettingsStub()).chat(TurnRequest(message="hi"))


@pytest.mark.asyncio
async def test_missing_endpoint_is_validation_error():
    class NoEndpoint:
        chat_endpoint_url = ""
        http_timeout = 1.0

    with pytest.raises(ValidationError):
        await ChurnApiClient(NoEndpoint()).chat(TurnRequest(message="hi"))
