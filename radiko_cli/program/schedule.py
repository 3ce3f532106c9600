"""
Fetches program schedules, either a station's week or an area's day.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import date

from pydantic import ValidationError

from radiko_cli.api.http import HttpRequest, RadikoHttpClient, check_body
from radiko_cli.exceptions import ResponseError

from .area import AreaPrefecture
from .models import ProgramSchedule
from .station import element_text, parse_xml

log = logging.getLogger(__name__)

WEEKLY_SCHEDULE_URL = "https://radiko.jp/v3/program/station/weekly/{station_id}.xml"
DAILY_SCHEDULE_URL = "https://api.radiko.jp/program/v3/date/{date}/area/{area_id}.xml"


def _parse_program(prog: ET.Element) -> dict:
    fields: dict = {**prog.attrib, **element_text(prog)}
    fields["tags"] = [
        (item.findtext("name") or "").strip() for item in prog.findall("tag/item")
    ]
    if (genre := prog.find("genre")) is not None:
        fields["genre"] = {
            "personalities": [
                {**p.attrib, "name": p.findtext("name")}
                for p in genre.findall("personality")
            ],
            "programs": [
                {**p.attrib, "name": p.findtext("name")} for p in genre.findall("program")
            ],
        }
    fields["metas"] = [dict(meta.attrib) for meta in prog.findall("metas/meta")]
    return fields


def parse_program_schedule(root: ET.Element) -> ProgramSchedule:
    stations = []
    for station in root.findall("stations/station"):
        stations.append(
            {
                "station_id": station.get("id"),
                "station_name": station.findtext("name"),
                "daily_schedules": [
                    {
                        "date": progs.findtext("date"),
                        "programs": [_parse_program(p) for p in progs.findall("prog")],
                    }
                    for progs in station.findall("progs")
                ],
            }
        )

    try:
        return ProgramSchedule.model_validate(
            {
                "ttl": root.findtext("ttl"),
                "srvtime": root.findtext("srvtime"),
                "stations": stations,
            }
        )
    except ValidationError as e:
        raise ResponseError(f"unexpected program schedule: {e}") from e


class ProgramScheduleService:
    """Client for the weekly (per station) and daily (per area) schedules."""

    def __init__(self, http_client: RadikoHttpClient):
        self._http_client = http_client

    async def get_weekly_schedule(self, station_id: str) -> ProgramSchedule:
        url = WEEKLY_SCHEDULE_URL.format(station_id=station_id)
        return await self._fetch(url)

    async def get_daily_schedule(
        self, area: AreaPrefecture, day: date
    ) -> ProgramSchedule:
        url = DAILY_SCHEDULE_URL.format(date=day.strftime("%Y%m%d"), area_id=area.area_id)
        return await self._fetch(url)

    async def _fetch(self, url: str) -> ProgramSchedule:
        response = await self._http_client.get(HttpRequest(url=url))
        body = check_body(response)
        schedule = parse_program_schedule(parse_xml(body))
        log.debug(f"Fetched schedule for {len(schedule.stations)} station(s)")
        return schedule
