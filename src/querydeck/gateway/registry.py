"""Gateway registry for selecting a backend by configured type."""

from __future__ import annotations

from collections.abc import Callable

from querydeck.config.settings import GatewayConfig
from querydeck.gateway.interface import ExecutionGateway
from querydeck.gateway.spanner import SpannerGateway

GatewayBuilder = Callable[[GatewayConfig], ExecutionGateway]

_GATEWAYS: dict[str, GatewayBuilder] = {
    "spanner": SpannerGateway,
}


def get_gateway(config: GatewayConfig) -> ExecutionGateway:
    """Build the gateway for ``config.type``.

    Raises:
        ValueError: If no gateway is registered for the type.
    """
    normalized = config.type.lower().strip()
    builder = _GATEWAYS.get(normalized)
    if builder is None:
        raise ValueError(f"Unknown gateway type: {config.type}")
    return builder(config)


def register_gateway(gateway_type: str, builder: GatewayBuilder) -> None:
    _GATEWAYS[gateway_type.lower().strip()] = builder


def list_gateways() -> list[str]:
    return sorted(_GATEWAYS.keys())
