"""
dashproxy - JSON-RPC forwarding shim for dashboard widgets.
"""

__version__ = "0.1.0"
__logo__ = "🧭"
