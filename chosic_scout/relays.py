import time
import webbrowser
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import quote

import httpx

from .config import settings
from .errors import DeliveryError
from .logger import logger
from .schemas import RelayConfig, RelayStatus

DEFAULT_HEADERS = {"Accept": "application/json, text/html"}

# Same set of unescaped characters as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_url(relay: RelayConfig, target: str) -> str:
    return relay.template.format(url=quote(target, safe=_URI_COMPONENT_SAFE), raw_url=target)


class ProxyRotator:
    """
    Sends requests through a fixed, ordered list of CORS relays.

    Each call starts at the relay that last succeeded and walks the list once,
    wrapping around, returning the first 2xx response. Build one per process
    and share it so the rotation start carries over between calls.
    """

    def __init__(
        self,
        relays: Optional[List[RelayConfig]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.relays = list(relays if relays is not None else settings.RELAYS)
        self.timeout = timeout if timeout is not None else settings.REQUESTS_TIMEOUT
        self.transport = transport
        # Best-effort hint; concurrent calls may overwrite each other
        self.start_index = 0

    def _client(self) -> httpx.AsyncClient:
        kwargs: Dict[str, Any] = {"timeout": self.timeout}
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return httpx.AsyncClient(**kwargs)

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        if not self.relays:
            raise DeliveryError("no relays configured")

        merged = {**DEFAULT_HEADERS, **(headers or {})}
        last_error: Optional[Exception] = None
        count = len(self.relays)

        async with self._client() as client:
            for offset in range(count):
                index = (self.start_index + offset) % count
                relay = self.relays[index]
                relay_url = build_url(relay, url)
                logger.debug(f"Trying relay {relay.name} for {method} {url}")
                try:
                    r = await client.request(method, relay_url, headers=merged, data=data)
                except httpx.HTTPError as e:
                    logger.warning(f"Relay {relay.name} failed: {e!r}")
                    last_error = e
                    continue

                if r.is_success:
                    if index != self.start_index:
                        logger.info(f"Switching to relay {relay.name}")
                    self.start_index = index
                    logger.info(f"Relay {relay.name} answered {r.status_code} for {url}")
                    return r

                logger.warning(f"Relay {relay.name} answered {r.status_code}")

        if last_error is not None:
            raise DeliveryError(f"all relays failed: {last_error}", last_error=last_error) from last_error
        raise DeliveryError()

    async def probe(self, target: Optional[str] = None) -> List[RelayStatus]:
        """Check every relay with a GET to a known-good URL. Leaves the rotation untouched."""
        target = target or settings.RELAY_PROBE_URL
        statuses: List[RelayStatus] = []
        async with self._client() as client:
            for relay in self.relays:
                relay_url = build_url(relay, target)
                try:
                    r = await client.get(relay_url, headers=DEFAULT_HEADERS)
                except httpx.HTTPError as e:
                    statuses.append(RelayStatus(name=relay.name, url=relay_url, ok=False, error=repr(e)))
                    continue
                statuses.append(
                    RelayStatus(name=relay.name, url=relay_url, ok=r.is_success, status_code=r.status_code)
                )
        logger.info(f"Relay probe: {sum(s.ok for s in statuses)}/{len(statuses)} reachable")
        return statuses


def activate_relays(
    relays: Optional[List[RelayConfig]] = None,
    opener: Callable[[str], Any] = webbrowser.open_new_tab,
    sleep: Callable[[float], Any] = time.sleep,
    stagger: Optional[float] = None,
) -> None:
    """
    Open the consent page of every relay that needs a manual visit before it
    will serve requests. Pages are opened one after another with a pause in
    between so browsers don't treat them as a popup burst.
    """
    relays = relays if relays is not None else settings.RELAYS
    stagger = settings.ACTIVATION_STAGGER_SECONDS if stagger is None else stagger

    pages = [r.activation_url for r in relays if r.activation_url]
    for i, page in enumerate(pages):
        if i:
            sleep(stagger)
        logger.info(f"Opening relay activation page {page}")
        opener(page)
