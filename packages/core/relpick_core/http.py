"""HTTPS stream opener with explicit CA handling."""

from __future__ import annotations

import ssl
import urllib.request
from typing import Any, Callable, ContextManager

import certifi

from .config import NetworkConfig


# Opens ``url`` and returns a context-managed binary response with ``read(n)``.
StreamOpener = Callable[[str], ContextManager[Any]]


def build_ssl_context(network: NetworkConfig | None = None) -> ssl.SSLContext:
    network = network or NetworkConfig()
    if network.allow_insecure_tls:
        return ssl._create_unverified_context()
    if network.ca_bundle:
        return ssl.create_default_context(cafile=network.ca_bundle)
    return ssl.create_default_context(cafile=certifi.where())


def urlopen(url: str, timeout: int, accept: str = "*/*", network: NetworkConfig | None = None):
    network = network or NetworkConfig()
    request = urllib.request.Request(
        url,
        headers={
            "User-Agent": network.user_agent,
            "Accept": accept,
        },
    )
    return urllib.request.urlopen(request, timeout=timeout, context=build_ssl_context(network))


def make_opener(network: NetworkConfig | None = None, timeout: int = 180) -> StreamOpener:
    def _open(url: str):
        return urlopen(url, timeout=timeout, accept="application/octet-stream", network=network)

    return _open
