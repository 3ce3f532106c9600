import pytest

from conftest import make_response
from radiko_cli.exceptions import ResponseError
from radiko_cli.program.area import AreaPrefecture
from radiko_cli.program.station import StationService

STATION_LIST_XML = """<?xml version="1.0" encoding="UTF-8"?>
<stations area_id="JP13" area_name="TOKYO JAPAN">
  <station>
    <id>TBS</id>
    <name>TBSラジオ</name>
    <ascii_name>TBS RADIO</ascii_name>
    <ruby>てぃーびーえすらじお</ruby>
    <areafree>1</areafree>
    <timefree>1</timefree>
    <logo width="224" height="100" align="center">https://radiko.jp/v2/static/station/logo/TBS/224x100.png</logo>
    <logo width="448" height="200" align="center">https://radiko.jp/v2/static/station/logo/TBS/448x200.png</logo>
    <banner>https://radiko.jp/res/banner/TBS/banner.png</banner>
    <href>https://www.tbsradio.jp/</href>
    <simul_max_delay>0</simul_max_delay>
    <tf_max_delay></tf_max_delay>
  </station>
  <station>
    <id>JORF-TEST</id>
    <name></name>
    <timefree>0</timefree>
  </station>
</stations>
"""


@pytest.mark.asyncio
async def test_get_stations(http_client):
    url = "https://radiko.jp/v3/station/list/JP13.xml"
    http_client.add(url, make_response(body=STATION_LIST_XML))

    area_stations = await StationService(http_client).get_stations(AreaPrefecture.TOKYO)

    assert area_stations.area_id == "JP13"
    assert area_stations.area_name == "TOKYO JAPAN"
    tbs, other = area_stations.stations
    assert tbs.station_id == "TBS"
    assert tbs.station_name == "TBSラジオ"
    assert tbs.supports_timefree
    assert tbs.areafree == 1
    assert tbs.simul_max_delay == 0
    assert tbs.tf_max_delay is None
    assert [logo.width for logo in tbs.logos] == [224, 448]
    assert tbs.logos[0].url.endswith("224x100.png")
    assert other.station_name is None
    assert not other.supports_timefree
    assert http_client.requests_to(url)


@pytest.mark.asyncio
async def test_get_stations_invalid_xml(http_client):
    http_client.add(
        "https://radiko.jp/v3/station/list/JP13.xml", make_response(body="<stations>")
    )

    with pytest.raises(ResponseError, match="invalid XML"):
        await StationService(http_client).get_stations(AreaPrefecture.TOKYO)
