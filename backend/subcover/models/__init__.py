from subcover.models.activity_log import ActivityLog  # noqa: F401
from subcover.models.time_slot import DayOfWeek, TimeSlot  # noqa: F401
from subcover.models.classroom import ClassGroup, Classroom  # noqa: F401
from subcover.models.coverage_request import (  # noqa: F401
    CoverageRequest,
    CoverageRequestShift,
    CoverageRequestShiftStatus,
    CoverageRequestStatus,
    CoverageRequestType,
)
from subcover.models.schedule import ScheduleCell, ScheduleCellClassGroup, TeacherSchedule  # noqa: F401
from subcover.models.staff import Staff  # noqa: F401
from subcover.models.sub_assignment import SubAssignment, SubAssignmentStatus  # noqa: F401
from subcover.models.substitute_contact import (  # noqa: F401
    ResponseStatus,
    SubContactShiftOverride,
    SubstituteContact,
)
from subcover.models.time_off import (  # noqa: F401
    ShiftSelectionMode,
    TimeOffRequest,
    TimeOffShift,
    TimeOffStatus,
)
