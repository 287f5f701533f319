"""WSGI entry point for the Iftar Desk backend."""

from __future__ import annotations

import os
import socket

from iftar_desk import create_app

app = create_app()


def _lan_addresses() -> list[str]:
    """Best-effort list of non-loopback IPv4 addresses for the startup banner."""
    addresses: set[str] = set()
    try:
        for info in socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET):
            address = info[4][0]
            if not address.startswith("127."):
                addresses.add(address)
    except OSError:
        app.logger.debug("Could not resolve LAN addresses", exc_info=True)
    return sorted(addresses)


if __name__ == "__main__":  # pragma: no cover - manual runtime entrypoint
    port_env = os.getenv("IFTAR_DESK_PORT") or os.getenv("PORT")
    port = int(port_env) if port_env else 3000
    app.logger.info("Iftar Desk server running on port %s", port)
    for address in _lan_addresses():
        app.logger.info("Network: http://%s:%s", address, port)
    app.run(host="0.0.0.0", port=port)
