"""
Keyword search over live and timefree programs.
"""

import json
import logging
from datetime import date, timedelta
from enum import Enum
from typing import Callable

from pydantic import ValidationError

from radiko_cli.api.http import HttpRequest, RadikoHttpClient, check_body
from radiko_cli.exceptions import ResponseError
from radiko_cli.utils.validation import require_in_range, require_not_blank

from .area import AreaPrefecture
from .models import ProgramSearchResult

log = logging.getLogger(__name__)

SEARCH_URL = "https://api.annex-cf.radiko.jp/v1/programs/legacy/perl/program/search"

MIN_ROW_LIMIT = 1
MAX_ROW_LIMIT = 50
DEFAULT_ROW_LIMIT = 12
SEARCH_WINDOW_DAYS = 30


class ProgramTimeRangeFilter(Enum):
    """Restricts search results to timefree, live, or both."""

    PAST = "past"
    FUTURE = "future"
    ALL = ""


class ProgramSearchService:
    """
    Searches programs from the last 30 days onwards.

    Results are restricted to the current area unless `all_regions` is set,
    which only returns more when logged in as a premium member.
    """

    def __init__(
        self,
        http_client: RadikoHttpClient,
        area: AreaPrefecture,
        time_filter: ProgramTimeRangeFilter = ProgramTimeRangeFilter.ALL,
        all_regions: bool = False,
        row_limit: int = DEFAULT_ROW_LIMIT,
        today: Callable[[], date] = date.today,
    ):
        self._http_client = http_client
        self.area = area
        self.time_filter = time_filter
        self.all_regions = all_regions
        self._row_limit = require_in_range(
            row_limit, "row_limit", MIN_ROW_LIMIT, MAX_ROW_LIMIT
        )
        self._today = today

    @property
    def row_limit(self) -> int:
        return self._row_limit

    @row_limit.setter
    def row_limit(self, value: int) -> None:
        self._row_limit = require_in_range(
            value, "row_limit", MIN_ROW_LIMIT, MAX_ROW_LIMIT
        )

    def build_parameters(self, keyword: str, page_index: int) -> dict[str, str]:
        start_day = self._today() - timedelta(days=SEARCH_WINDOW_DAYS)
        return {
            "key": keyword,
            "filter": self.time_filter.value,
            "start_day": start_day.isoformat(),
            "end_day": "",
            "area_id": self.area.area_id,
            "region_id": "all" if self.all_regions else "",
            "cur_area_id": self.area.area_id,
            "page_idx": str(page_index),
            "row_limit": str(self._row_limit),
            "app_id": "pc",
            "action_id": "0",
        }

    async def search(self, keyword: str, page_index: int = 0) -> ProgramSearchResult:
        """
        Runs one page of a keyword search.

        Args:
            keyword: Search words; must not be blank.
            page_index: Zero-based page number.
        """
        require_not_blank(keyword, "keyword")
        if page_index < 0:
            raise ValueError(f"page_index must not be negative (value={page_index})")

        response = await self._http_client.get(
            HttpRequest(url=SEARCH_URL, parameters=self.build_parameters(keyword, page_index))
        )
        body = check_body(response)

        try:
            result = ProgramSearchResult.model_validate(json.loads(body))
        except json.JSONDecodeError as e:
            raise ResponseError(f"invalid JSON response. body={body}") from e
        except ValidationError as e:
            raise ResponseError(f"unexpected search response: {e}") from e

        log.debug(
            f"Search '{keyword}' page {page_index}: {len(result.programs)} result(s)"
        )
        return result
