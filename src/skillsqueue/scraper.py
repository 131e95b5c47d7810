"""Skills attempt scraper for VEX Tournament Manager.

Fetches ``{base_url}/skills`` and extracts, per team, the autonomous and
driving attempt counts from the results table.  Malformed rows are skipped
with a warning; network failures raise a :class:`~skillsqueue.exceptions.ScrapeError`
subtype.  Retrying is left to the caller.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import aiohttp
from bs4 import BeautifulSoup

from skillsqueue._constants import DEFAULT_REQUEST_TIMEOUT_S, SKILLS_PATH, SKILLS_ROW_SELECTOR
from skillsqueue._transport import HttpTransport, Transport
from skillsqueue.exceptions import ScrapeError
from skillsqueue.models.skills import TeamSkillsRow

_logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"[+-]?\d+")


def _parse_int(text: str) -> int | None:
    """Leading integer of *text* (``"3 attempts"`` -> 3), or ``None``."""
    match = _LEADING_INT_RE.match(text.strip())
    if match is None:
        return None
    return int(match.group(0))


def skills_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}{SKILLS_PATH}"


def parse_skills_table(html: str) -> list[TeamSkillsRow]:
    """Extract ``(team, autonomous, driving)`` from the skills results table.

    Only the first three cells of each row are read.  Rows with fewer cells
    are ignored silently; rows with an empty team number or non-numeric
    counts are skipped with a warning.
    """
    soup = BeautifulSoup(html, "lxml")
    rows: list[TeamSkillsRow] = []

    for tr in soup.select(SKILLS_ROW_SELECTOR):
        cells = tr.find_all("td")
        if len(cells) < 3:
            continue

        team_id = cells[0].get_text(strip=True)
        autonomous = _parse_int(cells[1].get_text())
        driving = _parse_int(cells[2].get_text())

        if not team_id or autonomous is None or driving is None:
            _logger.warning(
                "Invalid skills row: team=%r autonomous=%r driving=%r",
                team_id,
                cells[1].get_text(strip=True),
                cells[2].get_text(strip=True),
            )
            continue

        rows.append(TeamSkillsRow(team_id=team_id, autonomous=autonomous, driving=driving))

    return rows


class SkillsScraper:
    """Fetches and parses the tournament manager skills page.

    Usage::

        async with SkillsScraper() as scraper:
            rows = await scraper.fetch_skills_table("http://10.0.0.3")

    An externally supplied ``aiohttp.ClientSession`` is borrowed and never
    closed; otherwise one is created on first use and closed by
    :meth:`close`.
    """

    def __init__(
        self,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_S,
    ) -> None:
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._timeout = timeout

    async def __aenter__(self) -> SkillsScraper:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def _require_transport(self) -> Transport:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._http_session, timeout=self._timeout)
        return self._transport

    async def close(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    async def fetch_skills_table(self, base_url: str) -> list[TeamSkillsRow]:
        """Fetch ``{base_url}/skills`` and parse it."""
        url = skills_url(base_url)
        _logger.debug("Fetching skills from %s", url)

        try:
            html = await self._require_transport().get_text(url)
        except ScrapeError as exc:
            _logger.warning("Skills fetch failed (%s): %s", type(exc).__name__, exc)
            raise

        rows = parse_skills_table(html)
        _logger.debug("Scraped %d team(s)", len(rows))
        return rows
