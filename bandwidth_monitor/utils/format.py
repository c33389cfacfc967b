"""Human-readable formatting for byte counts and rates."""

_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")
_BIT_UNITS = ("bps", "Kbps", "Mbps", "Gbps", "Tbps")


def format_bytes(num_bytes: float) -> str:
    """
    Format a byte count with binary (1024) steps.

    >>> format_bytes(1536)
    '1.5 KB'
    """
    value = float(num_bytes)
    if abs(value) < 1024:
        return f"{int(value)} B"
    for unit in _BYTE_UNITS[1:]:
        value /= 1024.0
        if abs(value) < 1024 or unit == _BYTE_UNITS[-1]:
            break
    return f"{value:.1f} {unit}"


def format_bytes_per_sec(bytes_per_sec: float) -> str:
    """Format a byte rate, e.g. ``'2.0 KB/s'``."""
    value = float(bytes_per_sec)
    for unit in _BYTE_UNITS:
        if abs(value) < 1024 or unit == _BYTE_UNITS[-1]:
            return f"{value:.1f} {unit}/s"
        value /= 1024.0
    return f"{value:.1f} {_BYTE_UNITS[-1]}/s"


def format_bits_per_sec(bits_per_sec: float) -> str:
    """Format a link speed with decimal (1000) steps, e.g. ``'1.0 Gbps'``."""
    if bits_per_sec < 1000:
        return f"{int(bits_per_sec)} bps"
    value = float(bits_per_sec)
    for unit in _BIT_UNITS[1:]:
        value /= 1000.0
        if value < 1000 or unit == _BIT_UNITS[-1]:
            break
    return f"{value:.1f} {unit}"


SPARK_CHARS = "▁▂▃▄▅▆▇█"


def sparkline(values, ceiling: float, width: int = 0) -> str:
    """
    Render values as a one-line bar graph scaled from 0 to ``ceiling``.

    Only the last ``width`` values are drawn when width is given.
    """
    if width > 0:
        values = list(values)[-width:]
    if ceiling <= 0:
        ceiling = 1.0

    top = len(SPARK_CHARS) - 1
    chars = []
    for v in values:
        ratio = min(max(v / ceiling, 0.0), 1.0)
        chars.append(SPARK_CHARS[int(ratio * top)])
    return "".join(chars)
