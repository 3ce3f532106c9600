"""
Program Metadata Layer.

Clients for the area, station list, schedule and search endpoints. They map
responses into the plain records defined in `models`.
"""

from .area import AreaPrefecture, AreaService
from .schedule import ProgramScheduleService
from .search import ProgramSearchService, ProgramTimeRangeFilter
from .station import StationService

__all__ = [
    "AreaPrefecture",
    "AreaService",
    "ProgramScheduleService",
    "ProgramSearchService",
    "ProgramTimeRangeFilter",
    "StationService",
]
