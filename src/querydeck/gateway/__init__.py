"""Gateway package - backends that run queries for a session."""

from querydeck.gateway.interface import ExecutionGateway, GatewayError
from querydeck.gateway.registry import get_gateway, list_gateways, register_gateway
from querydeck.gateway.spanner import SpannerGateway

__all__ = [
    "ExecutionGateway",
    "GatewayError",
    "SpannerGateway",
    "get_gateway",
    "list_gateways",
    "register_gateway",
]
