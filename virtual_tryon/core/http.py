from typing import Optional

import httpx


def make_httpx_client(
    timeout: httpx.Timeout,
    proxy_url: str = "",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    if transport is not None:
        # injected transports (tests, custom routing) bypass any proxy
        return httpx.AsyncClient(timeout=timeout, trust_env=False, transport=transport)
    if not proxy_url:
        return httpx.AsyncClient(timeout=timeout, trust_env=False)
    try:
        return httpx.AsyncClient(timeout=timeout, trust_env=False, proxy=proxy_url)
    except TypeError:
        return httpx.AsyncClient(timeout=timeout, trust_env=False, proxies={"http": proxy_url, "https": proxy_url})
