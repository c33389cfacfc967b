"""
Best-effort public IP lookup with a time-bounded cache.

Lookups never block the caller: a cache miss returns None and starts a
background refresh, so the dashboard can show "unknown" and retry later.
"""

import ipaddress
import logging
import threading
import time
from typing import Callable, Optional, Sequence

import httpx

logger = logging.getLogger(__name__)


IP_SERVICES = (
    "https://api.ipify.org",
    "https://checkip.amazonaws.com",
    "https://ipinfo.io/ip",
    "https://ifconfig.me/ip",
)


class TtlCache:
    """Single mutex-guarded value that expires after ``ttl`` seconds."""

    def __init__(self, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self._clock = clock
        self._value: Optional[str] = None
        self._stored_at: Optional[float] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[str]:
        """Cached value, or None when empty or expired."""
        with self._lock:
            if self._stored_at is None:
                return None
            if self._clock() - self._stored_at >= self.ttl:
                return None
            return self._value

    def set(self, value: str) -> None:
        with self._lock:
            self._value = value
            self._stored_at = self._clock()

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._stored_at = None


def is_valid_ip(text: str) -> bool:
    try:
        ipaddress.ip_address(text)
    except ValueError:
        return False
    return True


def is_private_ip(text: str) -> bool:
    """True for private, loopback, link-local and unique-local addresses."""
    try:
        addr = ipaddress.ip_address(text)
    except ValueError:
        return False
    return addr.is_private or addr.is_loopback or addr.is_link_local


class PublicIpResolver:
    """Resolves this host's public address through plain-text IP echo services."""

    def __init__(
        self,
        cache: Optional[TtlCache] = None,
        services: Sequence[str] = IP_SERVICES,
        timeout: float = 3.0,
        client: Optional[httpx.Client] = None,
        retry_after: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cache = cache or TtlCache()
        self.services = tuple(services)
        self.timeout = timeout
        self.retry_after = retry_after
        self._client = client
        self._clock = clock
        self._last_attempt: Optional[float] = None
        self._refresh_thread: Optional[threading.Thread] = None
        self._refresh_lock = threading.Lock()

    def cached(self) -> Optional[str]:
        """Return the cached address without any network activity."""
        return self.cache.get()

    def lookup(self) -> Optional[str]:
        """
        Return the cached address, scheduling a refresh on a miss.

        After a refresh, misses wait ``retry_after`` seconds before the
        services are queried again.
        """
        ip = self.cache.get()
        if ip is None:
            last = self._last_attempt
            if last is None or self._clock() - last >= self.retry_after:
                self.refresh_async()
        return ip

    def refresh_async(self) -> bool:
        """Start a background refresh unless one is already running."""
        with self._refresh_lock:
            if self._refresh_thread is not None and self._refresh_thread.is_alive():
                return False
            self._refresh_thread = threading.Thread(
                target=self.refresh,
                daemon=True,
                name="public-ip-refresh",
            )
            self._last_attempt = self._clock()
            self._refresh_thread.start()
            return True

    def refresh(self) -> Optional[str]:
        """Query the services in order and cache the first valid answer."""
        if self._client is not None:
            ip = self._query(self._client)
        else:
            with httpx.Client(timeout=self.timeout) as client:
                ip = self._query(client)

        if ip is not None:
            self.cache.set(ip)
        return ip

    def _query(self, client: httpx.Client) -> Optional[str]:
        for url in self.services:
            try:
                response = client.get(url, timeout=self.timeout)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.debug("Public IP service %s failed: %s", url, e)
                continue

            ip = response.text.strip()
            if is_valid_ip(ip):
                return ip
            logger.debug("Public IP service %s returned %r", url, ip[:64])

        logger.info("Public IP could not be determined")
        return None

    def invalidate(self) -> None:
        self.cache.invalidate()

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until a running background refresh finishes."""
        thread = self._refresh_thread
        if thread is not None:
            thread.join(timeout)
