"""External network lookups."""

from .public_ip import PublicIpResolver, TtlCache, is_private_ip

__all__ = ["PublicIpResolver", "TtlCache", "is_private_ip"]
