"""
Application and action identifiers.

Every functional area of the academy is gated independently on four CRUD
actions. ``ALL_APPS`` is the canonical list the Admin row is built from;
``StudentDashboard`` and ``Profile`` only ever appear in the Student row.
"""

from enum import Enum


class AppName(str, Enum):
    DASHBOARD = "Dashboard"
    CONTACTS = "Contacts"
    LMS = "LMS"
    CRM = "CRM"
    CALENDAR = "Calendar"
    DISCUSS = "Discuss"
    ACCOUNTING = "Accounting"
    SALES = "Sales"
    INVENTORY = "Inventory"
    MANUFACTURING = "Manufacturing"
    WEBSITE = "Website"
    POINT_OF_SALE = "Point of Sale"
    MARKETING = "Marketing"
    TODO = "To-do"
    RECEPTION = "Reception"
    SETTINGS = "Settings"
    ACCESS_CONTROL = "Access Control"
    # student-only areas
    STUDENT_DASHBOARD = "StudentDashboard"
    PROFILE = "Profile"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


ALL_APPS: tuple[AppName, ...] = (
    AppName.DASHBOARD,
    AppName.CONTACTS,
    AppName.LMS,
    AppName.CRM,
    AppName.CALENDAR,
    AppName.DISCUSS,
    AppName.ACCOUNTING,
    AppName.SALES,
    AppName.INVENTORY,
    AppName.MANUFACTURING,
    AppName.WEBSITE,
    AppName.POINT_OF_SALE,
    AppName.MARKETING,
    AppName.TODO,
    AppName.RECEPTION,
    AppName.SETTINGS,
    AppName.ACCESS_CONTROL,
)

ACTIONS: tuple[str, ...] = tuple(a.value for a in Action)
