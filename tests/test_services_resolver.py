from dashproxy.config.schema import Config
from dashproxy.services.resolver import ServiceResolver, format_api_call


def test_format_api_call_fills_fields_and_trims_slashes() -> None:
    assert format_api_call("{url}/jsonrpc", {"url": "http://kodi.lan:8080/"}) == "http://kodi.lan:8080/jsonrpc"
    assert format_api_call("{url}/api/{endpoint}/", {"url": "http://h", "endpoint": "x"}) == "http://h/api/x"


def test_format_api_call_blanks_missing_and_falsey_fields() -> None:
    assert format_api_call("{url}/{key}/{flag}", {"url": "http://h", "flag": False}) == "http://h//"
    assert format_api_call("{url}:{port}", {"url": "http://h", "port": 0}) == "http://h:0"


def test_format_api_call_expands_nested_placeholders() -> None:
    fields = {"url": "http://{host}:{port}", "host": "nzb.lan", "port": 6789}
    assert format_api_call("{url}/jsonrpc", fields) == "http://nzb.lan:6789/jsonrpc"


def test_resolver_resolves_widget_and_capability() -> None:
    config = Config.model_validate(
        {
            "services": {
                "media": {
                    "kodi": {"widget": {"type": "kodi", "url": "http://kodi.lan", "username": "k", "password": "p"}},
                    "docs": {"href": "http://docs.lan"},
                }
            }
        }
    )
    resolver = ServiceResolver.from_config(config)

    widget = resolver.resolve("media", "kodi")
    assert widget is not None
    assert widget.username == "k"
    assert resolver.resolve("media", "docs") is None
    assert resolver.resolve("media", "missing") is None
    assert resolver.resolve("other", "kodi") is None

    template = resolver.api_capability_for("kodi")
    assert template == "{url}/jsonrpc"
    assert resolver.format_url(template, widget.template_fields()) == "http://kodi.lan/jsonrpc"
    assert resolver.api_capability_for("plex") is None


def test_resolver_keeps_extra_widget_fields_for_templates() -> None:
    config = Config.model_validate(
        {
            "services": {"g": {"s": {"widget": {"type": "custom", "url": "http://h", "slug": "abc"}}}},
            "widgets": {"custom": {"api": "{url}/rpc/{slug}"}},
        }
    )
    resolver = ServiceResolver.from_config(config)
    widget = resolver.resolve("g", "s")
    assert resolver.format_url(resolver.api_capability_for("custom"), widget.template_fields()) == "http://h/rpc/abc"
