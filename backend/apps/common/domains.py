# apps/common/domains.py

from urllib.parse import urlparse


def normalize_domain(value: str) -> str:
    """'https://www.Example.com/about' -> 'example.com'."""
    value = (value or "").strip().lower()
    if "://" not in value:
        value = f"http://{value}"
    host = urlparse(value).netloc.split("@")[-1].split(":")[0].strip(".")
    if host.startswith("www."):
        host = host[4:]
    return host
