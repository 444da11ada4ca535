"""
Host identity for inventory rows: machine name plus local IP addresses.
"""

from __future__ import annotations

import ipaddress
import logging
import socket
from typing import Optional

import netifaces

from ._types import HostIdentity

logger = logging.getLogger(__name__)


def _local_addresses() -> list[str]:
    """Collect the unicast addresses of every non-loopback interface."""
    addresses = set()

    for iface in netifaces.interfaces():
        if iface == "lo":
            continue
        families = netifaces.ifaddresses(iface)
        for family in (netifaces.AF_INET, netifaces.AF_INET6):
            for addr in families.get(family, []):
                # IPv6 addresses may carry a zone suffix ("fe80::1%eth0")
                address = addr.get("addr", "").split("%", 1)[0]
                try:
                    ip = ipaddress.ip_address(address)
                except ValueError:
                    continue
                if ip.is_loopback or ip.is_multicast or ip.is_unspecified:
                    continue
                addresses.add(address)

    return sorted(addresses)


def detect_host(hostname: Optional[str] = None) -> HostIdentity:
    """Identify the machine this sweep runs on."""
    name = hostname or socket.gethostname()
    ips = _local_addresses()
    if not ips:
        logger.warning(f"No non-loopback addresses found for {name}")
    return HostIdentity(name=name, ips=tuple(ips))
