"""Circuit aggregation and NBR 5410 sizing."""

from .circuits import LoadDescriptor, aggregate
from .schedule import ScheduleRow, build_schedule
from .sizing import LoadParameters, SizingResult, SizingStatus, size
from .survey import SurveyLoad, SurveyTotals, survey

__all__ = [
    "LoadDescriptor",
    "LoadParameters",
    "ScheduleRow",
    "SizingResult",
    "SizingStatus",
    "SurveyLoad",
    "SurveyTotals",
    "aggregate",
    "build_schedule",
    "size",
    "survey",
]
