"""VitalGuard server entry point: ``python -m vitalguard.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from vitalguard.core.config.settings import get_settings
from vitalguard.core.server.app import create_app


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the VitalGuard MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.vg_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger = logging.getLogger(__name__)
    if not settings.vg_allow_insecure_bind and not _is_loopback_host(settings.vg_host):
        raise RuntimeError(
            "Refusing to bind VitalGuard to a non-loopback host without an auth layer. "
            "Set VG_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    logger.info(
        "Starting VitalGuard on %s:%d (mode=%s)",
        settings.vg_host,
        settings.vg_port,
        settings.prediction_mode,
    )

    mcp = create_app(settings)
    mcp.run(
        transport="streamable-http",
        host=settings.vg_host,
        port=settings.vg_port,
    )


if __name__ == "__main__":
    run()
