import ipaddress


def is_valid_ip(value) -> bool:
    """Return True for an IPv4 or IPv6 literal. Hostnames are not resolved."""
    if not isinstance(value, str):
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def is_valid_port(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 <= value <= 65535


def parse_port(raw: str) -> int:
    try:
        port = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"port must be an integer, got {raw!r}") from None
    if not is_valid_port(port):
        raise ValueError(f"port must be between 0 and 65535, got {port}")
    return port
