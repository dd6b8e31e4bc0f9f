from sqlalchemy import Enum

# Closed value sets. Native ENUM types on PostgreSQL, VARCHAR elsewhere.

USER_ROLES = ("student", "manager", "admin")
COMPLAINT_STATUSES = ("new", "acknowledged", "in_progress", "resolved", "closed")
COMPLAINT_PRIORITIES = ("low", "medium", "high")
COMPLAINT_CATEGORIES = ("facilities", "equipment", "network", "classroom", "hygiene", "safety", "other")

user_role_enum = Enum(*USER_ROLES, name="user_role")
complaint_status_enum = Enum(*COMPLAINT_STATUSES, name="complaint_status")
complaint_priority_enum = Enum(*COMPLAINT_PRIORITIES, name="complaint_priority")
complaint_category_enum = Enum(*COMPLAINT_CATEGORIES, name="complaint_category")
