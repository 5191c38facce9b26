"""
SSRF Protection Module

Validates recipe URLs before fetching them so the extraction endpoint cannot
be pointed at localhost, private networks or non-http(s) schemes.
"""

import ipaddress
import socket
from urllib.parse import urlparse

import requests

USER_AGENT = 'Mozilla/5.0 (compatible; MealPlanner/1.0; +recipe-import)'

# Maximum page size for recipe imports (5MB)
MAX_PAGE_SIZE = 5 * 1024 * 1024

LOCALHOST_ALIASES = {'localhost', 'localhost.localdomain', 'ip6-localhost'}


class SSRFError(Exception):
    """Raised when a URL fails SSRF validation."""
    pass


def is_private_ip(ip_str):
    """Check if an IP address is private, loopback, or otherwise internal."""
    try:
        ip = ipaddress.ip_address(ip_str.split('%', 1)[0])
    except ValueError:
        return True  # Unparseable, treat as unsafe
    return (
        ip.is_private or
        ip.is_loopback or
        ip.is_reserved or
        ip.is_link_local or
        ip.is_multicast or
        ip.is_unspecified
    )


def _resolve(hostname):
    """All addresses a hostname maps to; a literal IP maps to itself."""
    try:
        return [str(ipaddress.ip_address(hostname))]
    except ValueError:
        pass
    infos = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


def is_safe_url(url):
    """
    Check a recipe URL before fetching it.

    Returns (is_safe, error_message); error_message is None when safe.
    """
    if not url:
        return False, "URL is empty"

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return False, "Malformed URL"

    if parsed.scheme not in ('http', 'https'):
        return False, f"Unsupported scheme '{parsed.scheme or 'none'}' (http and https only)"
    if not hostname:
        return False, "URL has no hostname"
    if hostname.lower() in LOCALHOST_ALIASES:
        return False, "Localhost is not allowed"

    try:
        addresses = _resolve(hostname)
    except socket.gaierror:
        return False, f"Could not resolve {hostname}"

    blocked = [address for address in addresses if is_private_ip(address)]
    if blocked:
        return False, f"{hostname} points to an internal address ({blocked[0]})"
    return True, None


def safe_fetch(url, timeout=10, max_size=MAX_PAGE_SIZE):
    """
    Download a recipe page after validating its URL, stopping at max_size bytes.

    Returns:
        requests.Response whose body has been read into memory

    Raises:
        SSRFError: URL rejected or page larger than max_size
        requests.RequestException: Network or HTTP status errors
    """
    ok, reason = is_safe_url(url)
    if not ok:
        raise SSRFError(reason)

    response = requests.get(url, headers={'User-Agent': USER_AGENT}, timeout=timeout, stream=True)
    response.raise_for_status()

    declared = response.headers.get('content-length', '')
    if declared.isdigit() and int(declared) > max_size:
        response.close()
        raise SSRFError(f"Page is {declared} bytes, limit is {max_size}")

    body = bytearray()
    for block in response.iter_content(chunk_size=16384):
        body.extend(block)
        if len(body) > max_size:
            response.close()
            raise SSRFError(f"Page is larger than the {max_size} byte limit")

    response._content = bytes(body)
    return response
