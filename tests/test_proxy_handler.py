import base64

import pytest

from dashproxy.config.schema import Config
from dashproxy.proxy.handler import ProxyResponse, jsonrpc_proxy_handler, resolve_target
from dashproxy.services.resolver import ServiceResolver
from dashproxy.utils.exceptions import CapabilityError, TransportError, ValidationError


def _resolver() -> ServiceResolver:
    config = Config.model_validate(
        {
            "services": {
                "media": {
                    "sonarr1": {
                        "href": "http://sonarr.lan",
                        "widget": {
                            "type": "sonarr",
                            "url": "http://sonarr.lan:8989/",
                            "username": "user",
                            "password": "pass",
                        },
                    },
                    "plex": {"widget": {"type": "plex", "url": "http://plex.lan"}},
                    "nowidget": {"href": "http://static.lan"},
                },
                "downloads": {"nzb": {"widget": {"type": "nzbget", "url": "http://nzb.lan:6789"}}},
            },
            "widgets": {"sonarr": {"api": "{url}/jsonrpc"}},
        }
    )
    return ServiceResolver.from_config(config)


class _Log:
    def __init__(self):
        self.debug: list[tuple] = []
        self.warning: list[tuple] = []


async def _call(transport, *, group="media", service="sonarr1", endpoint="system.status", log=None):
    log = log or _Log()
    return await jsonrpc_proxy_handler(
        group=group,
        service=service,
        endpoint=endpoint,
        resolver=_resolver(),
        transport=transport,
        log_debug=lambda *args: log.debug.append(args),
        log_warning=lambda *args: log.warning.append(args),
    )


def test_resolve_target_formats_url_from_widget_fields() -> None:
    widget, url = resolve_target(_resolver(), "media", "sonarr1", "system.status")
    assert widget.type == "sonarr"
    assert url == "http://sonarr.lan:8989/jsonrpc"


def test_resolve_target_checks_capability_before_endpoint() -> None:
    with pytest.raises(CapabilityError):
        resolve_target(_resolver(), "media", "plex", None)
    with pytest.raises(ValidationError) as err:
        resolve_target(_resolver(), "media", "sonarr1", "")
    assert err.value.details == {"field": "endpoint"}


@pytest.mark.asyncio
async def test_success_returns_result_only(fake_transport) -> None:
    transport = fake_transport(lambda call: (200, {"result": {"version": "3.0"}, "error": None}))
    response = await _call(transport)

    assert isinstance(response, ProxyResponse)
    assert response.status_code == 200
    assert response.content_type == "application/json"
    assert response.json() == {"result": {"version": "3.0"}}

    call = transport.calls[0]
    assert call["url"] == "http://sonarr.lan:8989/jsonrpc"
    assert call["body"]["method"] == "system.status"
    assert call["body"]["params"] is None
    assert call["headers"]["authorization"] == "Basic " + base64.b64encode(b"user:pass").decode("ascii")


@pytest.mark.asyncio
async def test_rpc_error_returns_200_with_error_object(fake_transport) -> None:
    transport = fake_transport(
        lambda call: (200, {"result": None, "error": {"code": -32601, "message": "Method not found"}})
    )
    response = await _call(transport)
    assert response.status_code == 200
    assert response.json() == {"result": None, "error": {"code": -32601, "message": "Method not found"}}


@pytest.mark.asyncio
async def test_unreachable_target_returns_500_with_code_2(fake_transport) -> None:
    log = _Log()
    transport = fake_transport(exc=TransportError("network error: All connection attempts failed"))
    response = await _call(transport, log=log)
    assert response.status_code == 500
    payload = response.json()
    assert payload["result"] is None
    assert payload["error"]["code"] == 2
    assert "All connection attempts failed" in payload["error"]["message"]
    assert len(log.warning) == 1


@pytest.mark.asyncio
async def test_builtin_widget_without_credentials_sends_no_auth(fake_transport, rpc_reply) -> None:
    transport = fake_transport(rpc_reply(result=[]))
    response = await _call(transport, group="downloads", service="nzb", endpoint="listgroups")
    assert response.status_code == 200
    assert transport.calls[0]["url"] == "http://nzb.lan:6789/jsonrpc"
    assert "authorization" not in transport.calls[0]["headers"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("group", "service"),
    [(None, "sonarr1"), ("media", None), ("", ""), ("media", "missing"), ("nope", "sonarr1"), ("media", "nowidget")],
)
async def test_unresolvable_service_is_400_without_call(fake_transport, group, service) -> None:
    log = _Log()
    transport = fake_transport(exc=AssertionError("must not be called"))
    response = await _call(transport, group=group, service=service, log=log)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid proxy service type"}
    assert transport.calls == []
    assert len(log.debug) == 1


@pytest.mark.asyncio
async def test_widget_without_api_is_403_without_call(fake_transport) -> None:
    transport = fake_transport(exc=AssertionError("must not be called"))
    response = await _call(transport, service="plex")
    assert response.status_code == 403
    assert response.json() == {"error": "Service does not support API calls"}
    assert transport.calls == []


@pytest.mark.asyncio
async def test_missing_endpoint_is_400_without_call(fake_transport) -> None:
    transport = fake_transport(exc=AssertionError("must not be called"))
    response = await _call(transport, endpoint=None)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid proxy endpoint"}
    assert transport.calls == []
