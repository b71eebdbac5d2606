'''
Static enums mirroring the value sets stored in the database.
'''
import enum

# --- Base Enum Class ---
class ListableEnum(str, enum.Enum):
    """A custom Enum base class that can list all member names."""
    @classmethod
    def get_all_names(cls) -> list[str]:
        return [member.value for member in cls]

class UserRole(ListableEnum):
    STUDENT = 'student'
    ADMIN = 'admin'

class PaymentStatusEnum(ListableEnum):
    PAID = 'paid'
    PENDING = 'pending'
    OVERDUE = 'overdue'

class PaymentTypeEnum(ListableEnum):
    RENT = 'rent'
    DEPOSIT = 'deposit'
    FINE = 'fine'
    OTHER = 'other'

# Statuses whose amount still counts towards the outstanding balance
UNSETTLED_STATUSES = frozenset({PaymentStatusEnum.PENDING, PaymentStatusEnum.OVERDUE})
