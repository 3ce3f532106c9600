"""
Fetches the list of stations broadcasting in an area.
"""

import logging
import xml.etree.ElementTree as ET

from pydantic import ValidationError

from radiko_cli.api.http import HttpRequest, RadikoHttpClient, check_body
from radiko_cli.exceptions import ResponseError

from .area import AreaPrefecture
from .models import AreaStations

log = logging.getLogger(__name__)

STATION_LIST_URL = "https://radiko.jp/v3/station/list/{area_id}.xml"


def parse_xml(body: str) -> ET.Element:
    """Parses an XML document, mapping syntax errors to ResponseError."""
    try:
        return ET.fromstring(body)
    except ET.ParseError as e:
        raise ResponseError(f"invalid XML response: {e}") from e


def element_text(element: ET.Element) -> dict[str, str]:
    """Collects the text of an element's leaf children, keyed by tag."""
    return {child.tag: (child.text or "").strip() for child in element if len(child) == 0}


def parse_area_stations(root: ET.Element) -> AreaStations:
    stations = []
    for station in root.findall("station"):
        fields: dict = element_text(station)
        fields["logos"] = [
            {**logo.attrib, "url": (logo.text or "").strip()}
            for logo in station.findall("logo")
        ]
        stations.append(fields)

    try:
        return AreaStations.model_validate(
            {
                "area_id": root.get("area_id"),
                "area_name": root.get("area_name"),
                "stations": stations,
            }
        )
    except ValidationError as e:
        raise ResponseError(f"unexpected station list: {e}") from e


class StationService:
    """Client for the per-area station list."""

    def __init__(self, http_client: RadikoHttpClient):
        self._http_client = http_client

    async def get_stations(self, area: AreaPrefecture) -> AreaStations:
        url = STATION_LIST_URL.format(area_id=area.area_id)
        response = await self._http_client.get(HttpRequest(url=url))
        body = check_body(response)

        area_stations = parse_area_stations(parse_xml(body))
        log.debug(f"{len(area_stations.stations)} stations in {area.area_id}")
        return area_stations
