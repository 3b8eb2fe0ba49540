from agenda.models.activity_log import ActivityLog  # noqa: F401
from agenda.models.blackout_period import BlackoutPeriodRecord  # noqa: F401
from agenda.models.class_schedule import ClassSchedule  # noqa: F401
from agenda.models.room import Room  # noqa: F401
from agenda.models.teacher import Teacher  # noqa: F401
from agenda.models.user import User, UserRole  # noqa: F401
