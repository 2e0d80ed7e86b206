from enum import Enum

class Role(str, Enum):
    ADMIN = "ADMIN"
    DOCTOR = "DOCTOR"
    PATIENT = "PATIENT"

class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"  # patient never joined


# cancel() refuses these; the generic update path does not consult it
NON_CANCELLABLE_STATUSES = frozenset(
    {AppointmentStatus.COMPLETED, AppointmentStatus.IN_PROGRESS}
)

MAX_COMPLAINT_LENGTH = 1000
MAX_CLINICAL_TEXT_LENGTH = 2000
