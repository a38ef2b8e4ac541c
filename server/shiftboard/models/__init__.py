from shiftboard.models.company import Company
from shiftboard.models.location import Location
from shiftboard.models.position import Position
from shiftboard.models.user import User, UserLocation, UserPosition
from shiftboard.models.shift import Shift
from shiftboard.models.timesheet import Timesheet
from shiftboard.models.time_off import TimeOffRequest

__all__ = [
    "Company",
    "Location",
    "Position",
    "User",
    "UserLocation",
    "UserPosition",
    "Shift",
    "Timesheet",
    "TimeOffRequest",
]
