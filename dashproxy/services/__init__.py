"""Service lookup and URL templating."""

from dashproxy.services.resolver import ServiceResolver, format_api_call

__all__ = ["ServiceResolver", "format_api_call"]
