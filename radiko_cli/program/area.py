"""
Prefecture codes used by radiko and detection of the caller's current area.
"""

import logging
from enum import Enum
from typing import Optional

from bs4 import BeautifulSoup

from radiko_cli.api.http import HttpRequest, RadikoHttpClient, check_body
from radiko_cli.exceptions import ResponseError

log = logging.getLogger(__name__)

AREA_URL = "https://api.radiko.jp/apparea/area"


class AreaPrefecture(Enum):
    """The 47 prefectures, keyed by radiko area id (JP1..JP47)."""

    HOKKAIDO = ("JP1", "北海道")
    AOMORI = ("JP2", "青森")
    IWATE = ("JP3", "岩手")
    MIYAGI = ("JP4", "宮城")
    AKITA = ("JP5", "秋田")
    YAMAGATA = ("JP6", "山形")
    FUKUSHIMA = ("JP7", "福島")
    IBARAKI = ("JP8", "茨城")
    TOCHIGI = ("JP9", "栃木")
    GUNMA = ("JP10", "群馬")
    SAITAMA = ("JP11", "埼玉")
    CHIBA = ("JP12", "千葉")
    TOKYO = ("JP13", "東京")
    KANAGAWA = ("JP14", "神奈川")
    NIIGATA = ("JP15", "新潟")
    TOYAMA = ("JP16", "富山")
    ISHIKAWA = ("JP17", "石川")
    FUKUI = ("JP18", "福井")
    YAMANASHI = ("JP19", "山梨")
    NAGANO = ("JP20", "長野")
    GIFU = ("JP21", "岐阜")
    SHIZUOKA = ("JP22", "静岡")
    AICHI = ("JP23", "愛知")
    MIE = ("JP24", "三重")
    SHIGA = ("JP25", "滋賀")
    KYOTO = ("JP26", "京都")
    OSAKA = ("JP27", "大阪")
    HYOGO = ("JP28", "兵庫")
    NARA = ("JP29", "奈良")
    WAKAYAMA = ("JP30", "和歌山")
    TOTTORI = ("JP31", "鳥取")
    SHIMANE = ("JP32", "島根")
    OKAYAMA = ("JP33", "岡山")
    HIROSHIMA = ("JP34", "広島")
    YAMAGUCHI = ("JP35", "山口")
    TOKUSHIMA = ("JP36", "徳島")
    KAGAWA = ("JP37", "香川")
    EHIME = ("JP38", "愛媛")
    KOUCHI = ("JP39", "高知")
    FUKUOKA = ("JP40", "福岡")
    SAGA = ("JP41", "佐賀")
    NAGASAKI = ("JP42", "長崎")
    KUMAMOTO = ("JP43", "熊本")
    OITA = ("JP44", "大分")
    MIYAZAKI = ("JP45", "宮崎")
    KAGOSHIMA = ("JP46", "鹿児島")
    OKINAWA = ("JP47", "沖縄")

    def __init__(self, area_id: str, kanji_name: str):
        self.area_id = area_id
        self.kanji_name = kanji_name

    @classmethod
    def from_area_id(cls, area_id: str) -> Optional["AreaPrefecture"]:
        return next((area for area in cls if area.area_id == area_id), None)


class AreaService:
    """Looks up the area radiko assigns to the caller's IP address."""

    def __init__(self, http_client: RadikoHttpClient):
        self._http_client = http_client

    async def get_current_area(self) -> AreaPrefecture:
        """
        Returns the prefecture reported by the area endpoint.

        The endpoint answers with a snippet such as
        `document.write('<span class="JP13">TOKYO JAPAN</span>');`.

        Raises:
            ResponseError: If no area can be read from the response.
        """
        response = await self._http_client.get(HttpRequest(url=AREA_URL))
        body = check_body(response)

        span = BeautifulSoup(body, "html.parser").find("span")
        if span is None:
            raise ResponseError("<span> does not exist")

        classes = span.get("class") or []
        area_id = " ".join(classes).strip()
        if not area_id:
            raise ResponseError("class attribute of <span> does not exist")

        area = AreaPrefecture.from_area_id(area_id)
        if area is None:
            raise ResponseError("unknown area_id")

        log.debug(f"Current area: {area.area_id} ({area.name})")
        return area
