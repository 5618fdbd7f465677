"""Business constants shared by the services."""

ROLE_EMPLOYEE = "employee"
ROLE_HR_ADMIN = "hr_admin"
ROLE_ADMIN = "admin"
PRIVILEGED_ROLES = (ROLE_ADMIN, ROLE_HR_ADMIN)

# 0=Sunday ... 6=Saturday
DEFAULT_WORK_DAYS = [1, 2, 3, 4, 5]
DEFAULT_WORK_START = "09:00"
DEFAULT_WORK_END = "17:00"
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

DEFAULT_SICK_LEAVE = 12
DEFAULT_VACATION_LEAVE = 15
DEFAULT_PERSONAL_LEAVE = 5

# hours credited to an attendance row with status "leave"
LEAVE_DAY_HOURS = 8

LEAVE_TYPES = ("Sick Leave", "Vacation", "Personal Leave", "Other")

# leave type -> LeaveBalance bucket; "Other" has no tracked bucket
LEAVE_TYPE_BUCKETS = {
    "Sick Leave": "sick_leave",
    "Vacation": "vacation",
    "Personal Leave": "personal_leave",
}

ONLINE_THRESHOLD_SECONDS = 5 * 60
MIN_PASSWORD_LENGTH = 8
