from enum import Enum

def _normalize(value: str) -> str:
    return value.strip().lower().replace("-", "_").replace(" ", "_")

class _LabelledEnum(str, Enum):
    """str Enum that also accepts case-insensitive names and legacy labels"""

    @classmethod
    def _labels(cls) -> dict:
        return {}

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        key = _normalize(value)
        for member in cls:
            if _normalize(member.value) == key or member.name.lower() == key:
                return member
        name = cls._labels().get(key)
        return cls[name] if name else None


# region ========== Payroll ==========

class PayrollStatus(_LabelledEnum):
    PENDING = "PENDING"
    VALIDATED = "VALIDATED"
    PAID = "PAID"

    @classmethod
    def _labels(cls) -> dict:
        return {"en_attente": "PENDING", "validé": "VALIDATED", "valide": "VALIDATED", "payé": "PAID", "paye": "PAID"}

class PaymentMethod(_LabelledEnum):
    BANK_TRANSFER = "BANK_TRANSFER"
    CASH = "CASH"
    MOBILE_MONEY = "MOBILE_MONEY"

    @classmethod
    def _labels(cls) -> dict:
        return {"virement": "BANK_TRANSFER", "transfer": "BANK_TRANSFER", "espèces": "CASH", "especes": "CASH"}

# endregion

# region ========== Leave ==========

class LeaveType(_LabelledEnum):
    PAID = "PAID"
    UNPAID = "UNPAID"
    SICK = "SICK"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"

class LeaveStatus(_LabelledEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

# endregion

class NotificationType(str, Enum):
    LEAVE_REQUEST = "LEAVE_REQUEST"
    PAYROLL = "PAYROLL"
    SYSTEM = "SYSTEM"
