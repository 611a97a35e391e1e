from models.academic import AcademicYear, ClassLevel, Section, Subject
from models.announcement import Announcement
from models.audit_log import AuditLog
from models.enrollment import Admission, Attendance, Promotion
from models.exam import Exam, ExamMark, ExamSchedule
from models.finance import FeeStructure, Invoice, Payment
from models.permission import Permission, RolePermission, UserRole
from models.role import Role
from models.school import SchoolProfile
from models.staff import Staff
from models.student import Student
from models.user import User

__all__ = [
    # RBAC
    "User",
    "Role",
    "Permission",
    "RolePermission",
    "UserRole",
    "AuditLog",
    # School
    "SchoolProfile",
    "AcademicYear",
    "ClassLevel",
    "Section",
    "Subject",
    "Staff",
    "Student",
    "Admission",
    "Attendance",
    "Promotion",
    "FeeStructure",
    "Invoice",
    "Payment",
    "Exam",
    "ExamSchedule",
    "ExamMark",
    "Announcement",
]
