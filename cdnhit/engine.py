"""Core sampling engine for cdnhit.

Each destination is probed with a fixed number of GET requests, one at
a time.  A request is timed with ``time.perf_counter()`` from dispatch
until the response headers arrive; the body is never read.  Responses
are classified as cache hits or misses and their latency appended to
the matching bucket of the destination's result.

A non-2xx status ends sampling for that destination and keeps what was
collected so far.  A transport failure aborts the whole run unless
``ProbeConfig.isolate_transport_errors`` is set, in which case only the
current destination stops.

Public API:
    build_client        -- httpx client configured from a ProbeConfig
    sample_destination  -- run all requests for a single destination
    probe_all           -- probe every destination in order
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence

import httpx

from cdnhit.classifier import classify, header_value
from cdnhit.errors import HeaderDecodeFailure, HttpStatusFailure, TransportError
from cdnhit.models import Destination, DestinationResult, ProbeConfig, ProbeOutcome, ResultSet

logger = logging.getLogger(__name__)

# Type alias for the progress callback.
# Signature: (destination_name, outcome_or_none, requests_total)
ProgressCallback = Callable[[str, Optional[ProbeOutcome], int], None]

# Invoked with the headers of the first response of each destination.
HeadersCallback = Callable[[Destination, httpx.Headers], None]

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


def build_client(
    config: ProbeConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the client shared by every probe of a run.

    Redirects are not followed, so a 3xx counts as a non-success status.
    """
    return httpx.AsyncClient(
        transport=transport,
        headers=config.headers,
        timeout=httpx.Timeout(config.timeout),
        http2=config.http2,
        follow_redirects=False,
    )


def _observed_value(headers: httpx.Headers, destination: Destination) -> Optional[str]:
    try:
        return header_value(headers, destination.cache_header_key)
    except HeaderDecodeFailure as exc:
        logger.debug("%s: %s, counted as miss", destination.name, exc)
        return None


async def _probe_once(
    client: httpx.AsyncClient,
    destination: Destination,
    index: int,
    clock: Clock,
    headers_callback: Optional[HeadersCallback],
) -> ProbeOutcome:
    """Send one timed GET and classify the response.

    Raises
    ------
    httpx.TransportError
        On connection, DNS, timeout or protocol failure.
    HttpStatusFailure
        If the response status is not 2xx.
    """
    request = client.build_request("GET", destination.url)

    t_send = clock()
    response = await client.send(request, stream=True)
    elapsed_ms = max((clock() - t_send) * 1000.0, 0.0)

    try:
        if index == 0 and headers_callback is not None:
            headers_callback(destination, response.headers)

        if not response.is_success:
            raise HttpStatusFailure(destination.name, response.status_code)

        return ProbeOutcome(
            index=index,
            status_code=response.status_code,
            cache_hit=classify(
                response.headers,
                destination.cache_header_key,
                destination.cache_expected_hit_value,
            ),
            elapsed_ms=round(elapsed_ms, 3),
            cache_header_value=_observed_value(response.headers, destination),
        )
    finally:
        await response.aclose()


async def sample_destination(
    destination: Destination,
    config: ProbeConfig,
    client: httpx.AsyncClient,
    progress_callback: ProgressCallback | None = None,
    headers_callback: HeadersCallback | None = None,
    clock: Clock = time.perf_counter,
    sleep: Sleep = asyncio.sleep,
) -> DestinationResult:
    """Run ``config.requests`` timed requests against *destination*.

    Parameters
    ----------
    destination:
        Target URL and cache rule.
    config:
        Request count, pacing delay and error-isolation mode.
    client:
        HTTP client; the transport is injected through it.
    progress_callback:
        Optional callable invoked before each request (with ``None``) and
        after each classified response.
    headers_callback:
        Optional callable receiving the first response's headers.
    clock, sleep:
        Time source and pacing coroutine.

    Raises
    ------
    TransportError
        On a transport failure, unless transport errors are isolated.
    """
    result = DestinationResult(destination=destination)
    delay_s = config.delay_ms / 1000.0

    for i in range(config.requests):
        if progress_callback:
            progress_callback(destination.name, None, config.requests)

        result.requests_attempted += 1
        try:
            outcome = await _probe_once(client, destination, i, clock, headers_callback)
        except HttpStatusFailure as exc:
            logger.warning(
                "%s; stopping after %d of %d requests",
                exc,
                result.total,
                config.requests,
            )
            result.failed_status = exc.status_code
            break
        except httpx.TransportError as exc:
            error = TransportError(destination.name, destination.url, exc)
            if not config.isolate_transport_errors:
                raise error from exc
            logger.warning("%s; skipping remaining requests", error)
            result.error = str(error)
            break

        result.record(outcome)
        logger.debug(
            "%s #%d: %d %s %.1fms",
            destination.name,
            i,
            outcome.status_code,
            "hit" if outcome.cache_hit else "miss",
            outcome.elapsed_ms,
        )
        if progress_callback:
            progress_callback(destination.name, outcome, config.requests)

        # Pacing delay (skip after last request).
        if i < config.requests - 1 and delay_s > 0:
            await sleep(delay_s)

    return result


async def probe_all(
    destinations: Sequence[Destination],
    config: ProbeConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    progress_callback: ProgressCallback | None = None,
    headers_callback: HeadersCallback | None = None,
    clock: Clock = time.perf_counter,
    sleep: Sleep = asyncio.sleep,
) -> ResultSet:
    """Probe *destinations* one after another and collect their results.

    Returns
    -------
    ResultSet
        One result per destination name, in probe order.
    """
    results = ResultSet()
    async with build_client(config, transport=transport) as client:
        for destination in destinations:
            logger.info("Probing %s (%s)", destination.name, destination.url)
            result = await sample_destination(
                destination,
                config,
                client,
                progress_callback=progress_callback,
                headers_callback=headers_callback,
                clock=clock,
                sleep=sleep,
            )
            results.add(result)
    return results
