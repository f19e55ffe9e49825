# config/points_config.py

from enum import Enum

class PointKey(str, Enum):
    one_to_one      = "one_to_one"
    referrals       = "referrals"
    weekly_meetings = "weekly_meetings"   # meeting attendance
    trainings       = "trainings"         # training attendance
    thank_you_notes = "thank_you_notes"
    visitors        = "visitors"
    chief_guests    = "chief_guests"
    power_dates     = "power_dates"
    inductions      = "inductions"

# Attendance source -> point key credited on first "present" mark
ATTENDANCE_POINT_KEYS = {
    "MEETING":  PointKey.weekly_meetings,
    "TRAINING": PointKey.trainings,
}

# Seeded once into the `points` table; values are edited by admins afterwards
DEFAULT_POINT_SCHEDULE = [
    {"key": PointKey.one_to_one.value,      "name": "121s",             "description": "One-to-One Meetings",  "value": 0, "order": 1},
    {"key": PointKey.referrals.value,       "name": "Referrals",        "description": "Business Referrals",   "value": 0, "order": 2},
    {"key": PointKey.weekly_meetings.value, "name": "Weekly Meetings",  "description": "Attendance Points",    "value": 0, "order": 3},
    {"key": PointKey.thank_you_notes.value, "name": "Thank You Notes",  "description": "Gratitude Points",     "value": 0, "order": 4},
    {"key": PointKey.visitors.value,        "name": "Visitors",         "description": "New Guests Invited",   "value": 0, "order": 5},
    {"key": PointKey.chief_guests.value,    "name": "Chief Guests",     "description": "Distinguished Guests", "value": 0, "order": 6},
    {"key": PointKey.power_dates.value,     "name": "Power Dates",      "description": "Strategic Meetings",   "value": 0, "order": 7},
    {"key": PointKey.inductions.value,      "name": "Inductions",       "description": "New Member Welcomes",  "value": 0, "order": 8},
    {"key": PointKey.trainings.value,       "name": "Trainings",        "description": "Training Attendance",  "value": 0, "order": 9},
]
