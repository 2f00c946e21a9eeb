from app.database.database import Base
from sqlalchemy import Column, String, JSON, Enum
from app.common.mixins import IdMixin, CreatedAtMixin, TimestampMixin
from app.modules.cost_codes.codec import CostCodeMapping
import enum

class CostCodeAction(str, enum.Enum):
    UPDATED = "updated"
    RESET = "reset"

class CostCodeSetting(Base, IdMixin, TimestampMixin):
    """Mapeo activo de códigos de costo (una sola fila por key)"""
    __tablename__ = "cost_code_settings"

    key = Column(String(50), nullable=False, unique=True)
    digit_to_letter = Column(JSON, nullable=False)  # {"0": "S", "1": "N", ...}
    double_zero_code = Column(String(10), nullable=False)
    triple_zero_code = Column(String(10), nullable=False)
    updated_by = Column(String(100), nullable=True)

    def to_mapping(self) -> CostCodeMapping:
        return CostCodeMapping.from_dict({
            "digitToLetter": self.digit_to_letter,
            "doubleZeroCode": self.double_zero_code,
            "tripleZeroCode": self.triple_zero_code,
            "updatedAt": self.updated_at,
            "updatedBy": self.updated_by,
        })

    def apply_mapping(self, mapping: CostCodeMapping):
        self.digit_to_letter = dict(mapping.digit_to_letter)
        self.double_zero_code = mapping.double_zero_code
        self.triple_zero_code = mapping.triple_zero_code
        self.updated_by = mapping.updated_by

class CostCodeChangeLog(Base, IdMixin, CreatedAtMixin):
    """Historial de cambios del mapeo de códigos de costo"""
    __tablename__ = "cost_code_change_logs"

    action = Column(Enum(CostCodeAction), nullable=False)
    user_id = Column(String(100), nullable=True)
    snapshot = Column(JSON, nullable=False)  # Mapeo escrito, formato CostCodeMapping.to_dict()
