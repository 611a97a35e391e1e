from enum import Enum


class PermissionAction(str, Enum):
    """Actions that combine with a module to form a permission"""
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [action.value for action in cls]


class PermissionModule(str, Enum):
    """Application modules a permission can target"""
    SCHOOL_PROFILE = "SCHOOL_PROFILE"
    ACADEMIC_YEAR = "ACADEMIC_YEAR"
    USER_MANAGEMENT = "USER_MANAGEMENT"
    CLASS_LEVEL = "CLASS_LEVEL"
    SECTION = "SECTION"
    SUBJECT = "SUBJECT"
    STAFF = "STAFF"
    FINANCE = "FINANCE"
    AUDIT_LOG = "AUDIT_LOG"
    STUDENT = "STUDENT"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [module.value for module in cls]


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DEACTIVATED = "DEACTIVATED"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [status.value for status in cls]


class AuditAction(str, Enum):
    """Audit log action types"""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    LOGIN = "login"
    PASSWORD_RESET = "password_reset"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROMOTED = "promoted"
    ATTENDANCE_MARKED = "attendance_marked"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [action.value for action in cls]


class RecordStatus(str, Enum):
    """Status of classes, sections and subjects"""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class StaffStatus(str, Enum):
    ACTIVE = "Active"
    ON_LEAVE = "On Leave"
    RESIGNED = "Resigned"


class StudentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    GRADUATED = "Graduated"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class InvoiceStatus(str, Enum):
    UNPAID = "Unpaid"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"
    OVERDUE = "Overdue"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    BANK_TRANSFER = "Bank Transfer"
    ONLINE = "Online"


class ExamStatus(str, Enum):
    DRAFT = "Draft"
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    PUBLISHED = "Published"


class AdmissionStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    EXCUSED = "Excused"
