"""
Pydantic models for the station list, program schedule and search results.

The radiko endpoints send empty strings for absent values; every model maps
those to None before validation.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SCHEDULE_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
SCHEDULE_DATE_FORMAT = "%Y%m%d"
SEARCH_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class RadikoModel(BaseModel):
    """Base model: ignores unknown fields and treats "" or null as a missing value."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_empty_values(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data


def _parse_datetime(value: Any, fmt: str) -> Any:
    if isinstance(value, str):
        return datetime.strptime(value, fmt)
    return value


# --- Station list ---


class StationLogo(RadikoModel):
    width: Optional[int] = None
    height: Optional[int] = None
    align: Optional[str] = None
    url: Optional[str] = None


class Station(RadikoModel):
    station_id: str = Field(alias="id")
    station_name: Optional[str] = Field(default=None, alias="name")
    ascii_name: Optional[str] = None
    ruby: Optional[str] = None
    areafree: Optional[int] = None
    timefree: Optional[int] = None
    logos: list[StationLogo] = Field(default_factory=list)
    banner: Optional[str] = None
    href: Optional[str] = None
    simul_max_delay: Optional[int] = None
    tf_max_delay: Optional[int] = None

    @property
    def supports_timefree(self) -> bool:
        return self.timefree == 1


class AreaStations(RadikoModel):
    area_id: Optional[str] = None
    area_name: Optional[str] = None
    stations: list[Station] = Field(default_factory=list)


# --- Program schedule ---


class NamedItem(RadikoModel):
    id: Optional[str] = None
    name: Optional[str] = None


class ProgramGenre(RadikoModel):
    personalities: list[NamedItem] = Field(default_factory=list)
    programs: list[NamedItem] = Field(default_factory=list)


class ProgramMeta(RadikoModel):
    name: Optional[str] = None
    value: Optional[str] = None


class ProgramEntry(RadikoModel):
    id: Optional[str] = None
    master_id: Optional[str] = None
    ft: Optional[datetime] = None
    to: Optional[datetime] = None
    ftl: Optional[str] = None
    tol: Optional[str] = None
    dur: Optional[int] = None
    title: Optional[str] = None
    url: Optional[str] = None
    url_link: Optional[str] = None
    failed_record: Optional[str] = None
    ts_in_ng: Optional[int] = None
    tsplus_in_ng: Optional[int] = None
    ts_out_ng: Optional[int] = None
    tsplus_out_ng: Optional[int] = None
    desc: Optional[str] = None
    info: Optional[str] = None
    pfm: Optional[str] = None
    img: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    genre: Optional[ProgramGenre] = None
    metas: list[ProgramMeta] = Field(default_factory=list)

    @field_validator("ft", "to", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> Any:
        return _parse_datetime(v, SCHEDULE_TIMESTAMP_FORMAT)


class DailyProgramSchedule(RadikoModel):
    broadcast_date: date = Field(alias="date")
    programs: list[ProgramEntry] = Field(default_factory=list)

    @field_validator("broadcast_date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        if isinstance(v, str):
            return datetime.strptime(v, SCHEDULE_DATE_FORMAT).date()
        return v


class StationProgramSchedule(RadikoModel):
    station_id: str
    station_name: Optional[str] = None
    daily_schedules: list[DailyProgramSchedule] = Field(default_factory=list)

    def iter_programs(self):
        for daily in self.daily_schedules:
            yield from daily.programs

    def find_program(self, start: datetime) -> Optional[ProgramEntry]:
        """Returns the program starting exactly at `start`, if any."""
        return next((p for p in self.iter_programs() if p.ft == start), None)


class ProgramSchedule(RadikoModel):
    ttl: Optional[str] = None
    srvtime: Optional[str] = None
    stations: list[StationProgramSchedule] = Field(default_factory=list)

    def for_station(self, station_id: str) -> Optional[StationProgramSchedule]:
        return next((s for s in self.stations if s.station_id == station_id), None)


# --- Program search ---


class SearchCategory(RadikoModel):
    id: Optional[str] = None
    name: Optional[str] = None


class SearchGenre(RadikoModel):
    personality: Optional[SearchCategory] = None
    program: Optional[SearchCategory] = None


class SearchMeta(RadikoModel):
    key: list[str] = Field(default_factory=list)
    station_id: list[str] = Field(default_factory=list)
    area_id: list[str] = Field(default_factory=list)
    cur_area_id: Optional[str] = None
    region_id: Optional[str] = None
    start_day: Optional[date] = None
    end_day: Optional[date] = None
    filter: Optional[str] = None
    result_count: int = 0
    page_idx: int = 0
    row_limit: int = 0
    kakuchou: list[str] = Field(default_factory=list)
    suisengo: Optional[str] = None
    genre_id: list[str] = Field(default_factory=list)


class SearchProgram(RadikoModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    start_time_s: Optional[str] = None
    end_time_s: Optional[str] = None
    program_date: Optional[date] = None
    program_url: Optional[str] = None
    station_id: Optional[str] = None
    performer: Optional[str] = None
    title: Optional[str] = None
    info: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    img: Optional[str] = None
    genre: Optional[SearchGenre] = None
    ts_in_ng: Optional[int] = None
    ts_out_ng: Optional[int] = None
    tsplus_in_ng: Optional[int] = None
    tsplus_out_ng: Optional[int] = None
    metas: list[ProgramMeta] = Field(default_factory=list)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> Any:
        return _parse_datetime(v, SEARCH_TIMESTAMP_FORMAT)

    @field_validator("program_date", mode="before")
    @classmethod
    def parse_program_date(cls, v: Any) -> Any:
        if isinstance(v, str):
            return datetime.strptime(v, SCHEDULE_DATE_FORMAT).date()
        return v


class ProgramSearchResult(RadikoModel):
    meta: Optional[SearchMeta] = None
    programs: list[SearchProgram] = Field(default_factory=list, alias="data")
