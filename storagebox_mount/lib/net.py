from __future__ import annotations

import logging
import socket
from typing import List

logger = logging.getLogger(__name__)

SMB_PORT = 445


def resolve_host(host: str) -> List[str]:
    """Addresses for ``host``; empty when it does not resolve."""

    try:
        infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    except (socket.gaierror, UnicodeError):
        return []
    return sorted({str(i[4][0]) for i in infos})


def port_open(host: str, port: int = SMB_PORT, *, timeout: float = 5.0) -> bool:
    """Best-effort TCP connect check."""

    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False
