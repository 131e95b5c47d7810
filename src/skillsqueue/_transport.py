"""HTTP transport for tournament manager pages."""

from __future__ import annotations

import logging
from typing import Protocol

import aiohttp

from skillsqueue._constants import DEFAULT_REQUEST_TIMEOUT_S, USER_AGENT
from skillsqueue.exceptions import (
    ScrapeConnectionRefusedError,
    ScrapeError,
    ScrapeHttpError,
    ScrapeTimeoutError,
)

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the scraper."""

    async def get_text(self, url: str) -> str:
        ...


class HttpTransport:
    """aiohttp GET that maps every failure onto the :class:`ScrapeError` family."""

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_S,
    ) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def get_text(self, url: str) -> str:
        headers = {"user-agent": USER_AGENT}

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text(errors="replace")
                if resp.status != 200:
                    raise ScrapeHttpError(
                        f"HTTP {resp.status} from {url}",
                        status_code=resp.status,
                        url=url,
                    )
        except ScrapeError:
            raise
        except TimeoutError as exc:
            raise ScrapeTimeoutError(f"Request to {url} timed out", url=url) from exc
        except aiohttp.ClientConnectorError as exc:
            if isinstance(exc.os_error, ConnectionRefusedError):
                raise ScrapeConnectionRefusedError(f"Connection refused by {url}", url=url) from exc
            raise ScrapeError(f"Cannot connect to {url}: {exc}", url=url) from exc
        except aiohttp.ClientError as exc:
            raise ScrapeError(f"Request to {url} failed: {exc}", url=url) from exc

        return text
