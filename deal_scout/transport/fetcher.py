# deal_scout/transport/fetcher.py
"""
Fetcher module: one cancellable GET through a relay, and failover across the relay pool.
"""
from __future__ import annotations

import asyncio
import random
from typing import Any, Dict, Optional, Sequence

from aiohttp import ClientError, ClientSession

from deal_scout.errors import AllProxiesExhausted, Cancelled, FetchError, HttpError, TransportError
from deal_scout.logger import logger
from deal_scout.transport.cancel import CancelToken
from deal_scout.transport.relays import relay_order


class RelayFetcher:
    """Fetches JSON from the CRM API through a pool of CORS relays."""

    def __init__(
        self,
        session: ClientSession,
        relays: Sequence[str],
        timeout: float = 15.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.session = session
        self.relays = list(relays)
        self.timeout = timeout
        self._rng = rng

    @staticmethod
    def _headers(credential: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {credential}",
            "Content-Type": "application/json",
            "X-Requested-With": "XMLHttpRequest",
        }

    async def fetch(
        self,
        url: str,
        credential: str,
        token: Optional[CancelToken] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Try every relay in random order until one returns a JSON payload.

        Cancellation stops the walk at once. HTTP and transport errors move on
        to the next relay; when none is left, AllProxiesExhausted carries the
        last error seen.
        """
        last_error: Optional[FetchError] = None
        for relay_url in relay_order(url, self.relays, self._rng):
            try:
                return await self.fetch_once(relay_url, credential, token, timeout)
            except Cancelled:
                raise
            except FetchError as exc:
                logger.debug("Relay failed for %s: %s", relay_url, exc)
                last_error = exc
        raise AllProxiesExhausted(url, last_error)

    async def fetch_once(
        self,
        url: str,
        credential: str,
        token: Optional[CancelToken] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Single GET of an already relay-wrapped URL.

        The request races the per-attempt timer and *token*; whichever fires
        first tears the request down and raises Cancelled.
        """
        token = token or CancelToken()
        timeout = self.timeout if timeout is None else timeout
        if token.cancelled:
            raise Cancelled(token.reason or "cancelled", url)

        request = asyncio.ensure_future(self._get_json(url, credential))
        watcher = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {request, watcher}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            watcher.cancel()

        if request in done and watcher not in done:
            return request.result()

        request.cancel()
        await asyncio.gather(request, return_exceptions=True)
        reason = token.reason if token.cancelled else f"timed out after {timeout:g}s"
        raise Cancelled(reason or "cancelled", url)

    async def _get_json(self, url: str, credential: str) -> Any:
        try:
            async with self.session.get(url, headers=self._headers(credential)) as resp:
                if not 200 <= resp.status < 300:
                    raise HttpError(resp.status, url)
                # relays rewrite Content-Type freely, so parse regardless of it
                return await resp.json(content_type=None)
        except (ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"Malformed JSON from {url}: {exc}") from exc
