from pydantic import BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List, Dict
from uuid import UUID
from datetime import datetime

from app.modules.cost_codes.codec import (
    CostCodeMapping,
    DEFAULT_DOUBLE_ZERO_CODE,
    DEFAULT_TRIPLE_ZERO_CODE,
)
from app.modules.cost_codes.models import CostCodeAction


class CostCodeMappingIn(BaseModel):
    """Esquema para actualizar el mapeo de códigos de costo"""
    digit_to_letter: Dict[str, str] = Field(..., description="Letra para cada dígito 0-9 (ej. {'1': 'N'})")
    double_zero_code: str = Field(DEFAULT_DOUBLE_ZERO_CODE, min_length=1, max_length=10, description="Código para '00'")
    triple_zero_code: str = Field(DEFAULT_TRIPLE_ZERO_CODE, min_length=1, max_length=10, description="Código para '000'")
    updated_by: Optional[str] = Field(None, max_length=100, description="Usuario que realiza el cambio")

    @field_validator('digit_to_letter')
    @classmethod
    def normalize_letters(cls, v):
        return {str(digit).strip(): letter.strip().upper() for digit, letter in v.items()}

    @field_validator('double_zero_code', 'triple_zero_code')
    @classmethod
    def normalize_code(cls, v):
        return v.strip().upper()

    @model_validator(mode='after')
    def validate_mapping(self):
        # Lanza InvalidCostCodeMapping (ValueError) si el mapeo es ambiguo
        self.to_mapping()
        return self

    def to_mapping(self) -> CostCodeMapping:
        return CostCodeMapping(
            self.digit_to_letter,
            double_zero_code=self.double_zero_code,
            triple_zero_code=self.triple_zero_code,
            updated_by=self.updated_by
        )


class CostCodeMappingOut(BaseModel):
    """Esquema para devolver el mapeo activo"""
    digit_to_letter: Dict[str, str]
    letter_to_digit: Dict[str, str]
    double_zero_code: str
    triple_zero_code: str
    is_default: bool
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    @classmethod
    def from_mapping(cls, mapping: CostCodeMapping) -> "CostCodeMappingOut":
        return cls(
            digit_to_letter=dict(mapping.digit_to_letter),
            letter_to_digit=dict(mapping.letter_to_digit),
            double_zero_code=mapping.double_zero_code,
            triple_zero_code=mapping.triple_zero_code,
            is_default=mapping.is_default(),
            updated_at=mapping.updated_at,
            updated_by=mapping.updated_by
        )


class ResetRequest(BaseModel):
    """Esquema para restablecer el mapeo por defecto"""
    updated_by: Optional[str] = Field(None, max_length=100)


class EncodeRequest(BaseModel):
    cost: Decimal = Field(..., allow_inf_nan=False, description="Costo a codificar; decimales se truncan, negativos cuentan como 0")


class EncodeResponse(BaseModel):
    cost: Decimal
    code: str


class DecodeRequest(BaseModel):
    code: str = Field(..., max_length=100, description="Código de letras a decodificar")


class DecodeResponse(BaseModel):
    """Respuesta de decodificación; cost es None si el código no es válido"""
    code: str
    cost: Optional[int] = None
    valid: bool


class ValidateResponse(BaseModel):
    code: str
    valid: bool


class PreviewRow(BaseModel):
    cost: int
    code: str


class PreviewResponse(BaseModel):
    """Ejemplos de codificación con el mapeo activo"""
    rows: List[PreviewRow]
    is_default: bool


class ChangeLogOut(BaseModel):
    """Esquema para devolver un cambio del mapeo"""
    id: UUID
    action: CostCodeAction
    user_id: Optional[str] = None
    snapshot: Dict
    created_at: datetime

    class Config:
        from_attributes = True


class ChangeLogList(BaseModel):
    """Esquema para listar cambios con paginación"""
    changes: List[ChangeLogOut]
    total: int
    limit: int
    offset: int
