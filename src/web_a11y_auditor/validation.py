"""Target URL validation with SSRF protection.

Runs before any network access: the URL must parse, use http or https, and
every address its hostname resolves to must be publicly routable.
"""

from __future__ import annotations

import ipaddress
import logging
import socket
from collections.abc import Callable
from urllib.parse import urlsplit

from web_a11y_auditor.exceptions import AuditValidationError

logger = logging.getLogger(__name__)

Resolver = Callable[[str], list[str]]

ALLOWED_SCHEMES = frozenset({"http", "https"})
BLOCKED_HOSTNAMES = frozenset({"localhost", "localhost.localdomain", "ip6-localhost", "ip6-loopback"})


def resolve_host(hostname: str) -> list[str]:
    """Resolve a hostname to every IPv4/IPv6 address it maps to."""
    infos = socket.getaddrinfo(hostname, None, proto=socket.IPPROTO_TCP)
    return sorted({info[4][0] for info in infos})


def is_public_address(address: str) -> bool:
    """Return True only for globally routable unicast addresses."""
    ip = ipaddress.ip_address(address.split("%", 1)[0])
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_unspecified
        or ip.is_reserved
        or ip.is_multicast
        or not ip.is_global
    )


def _is_ip_literal(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname.split("%", 1)[0])
    except ValueError:
        return False
    return True


class UrlValidator:
    """Rejects malformed or network-unsafe audit targets."""

    def __init__(self, resolver: Resolver | None = None) -> None:
        self.resolver = resolver or resolve_host

    def validate(self, url: str) -> str:
        """Validate a target URL.

        Args:
            url: The raw URL submitted for auditing.

        Returns:
            The URL, stripped of surrounding whitespace.

        Raises:
            AuditValidationError: If the URL is malformed, uses another scheme,
                or resolves to a loopback, private, or link-local address.
        """
        candidate = (url or "").strip()
        try:
            parts = urlsplit(candidate)
            hostname = parts.hostname
            parts.port  # noqa: B018 - raises ValueError on a malformed port
        except ValueError as exc:
            raise AuditValidationError("Invalid URL format", details={"url": candidate}) from exc

        if parts.scheme.lower() not in ALLOWED_SCHEMES:
            raise AuditValidationError("Only HTTP and HTTPS URLs are allowed", details={"url": candidate})
        if not hostname:
            raise AuditValidationError("Invalid URL format", details={"url": candidate})

        hostname = hostname.lower().rstrip(".")
        if hostname in BLOCKED_HOSTNAMES or hostname.endswith(".localhost"):
            raise AuditValidationError("URL points to private/internal network", details={"host": hostname})

        addresses = self._addresses_for(hostname)
        blocked = [addr for addr in addresses if not is_public_address(addr)]
        if blocked:
            logger.warning("Rejected %s: resolves to non-public address(es) %s", hostname, blocked)
            raise AuditValidationError(
                "URL points to private/internal network",
                details={"host": hostname, "addresses": blocked},
            )
        return candidate

    def _addresses_for(self, hostname: str) -> list[str]:
        if _is_ip_literal(hostname):
            return [hostname]
        try:
            addresses = self.resolver(hostname)
        except (OSError, UnicodeError) as exc:
            raise AuditValidationError("Could not resolve host", details={"host": hostname}) from exc
        if not addresses:
            raise AuditValidationError("Could not resolve host", details={"host": hostname})
        return list(addresses)
