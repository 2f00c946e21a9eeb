from fastapi import APIRouter, Query, Path
from typing import Optional

from app.core.config import settings
from app.dependencies.dbDependecies import db_dependency
from app.modules.cost_codes.service import CostCodeService
from app.modules.cost_codes.schemas import (
    CostCodeMappingIn, CostCodeMappingOut, ResetRequest, EncodeRequest, EncodeResponse,
    DecodeRequest, DecodeResponse, ValidateResponse, PreviewResponse, ChangeLogList
)

cost_codes_router = APIRouter(prefix="/cost-codes", tags=["Cost Codes"])


@cost_codes_router.get("/mapping", response_model=CostCodeMappingOut)
def get_mapping(db: db_dependency):
    """
    Obtener el mapeo activo de códigos de costo

    Si nunca se ha guardado un mapeo se devuelve el mapeo por defecto
    (1-9 → N B Q M F Z V L J, 0 → S, 00 → SC, 000 → SCS).
    """
    service = CostCodeService(db)
    return CostCodeMappingOut.from_mapping(service.get_mapping())


@cost_codes_router.put("/mapping", response_model=CostCodeMappingOut)
def update_mapping(data: CostCodeMappingIn, db: db_dependency):
    """
    Actualizar el mapeo de códigos de costo

    Restricciones:
    - Cada dígito 0-9 debe tener una letra mayúscula única
    - Los códigos de doble y triple cero no pueden usar letras de dígitos distintos de cero
    - El código de triple cero no puede ser prefijo del de doble cero

    Los códigos ya impresos en productos no se recalculan.
    """
    service = CostCodeService(db)
    return CostCodeMappingOut.from_mapping(service.update_mapping(data))


@cost_codes_router.post("/mapping/reset", response_model=CostCodeMappingOut)
def reset_mapping(db: db_dependency, data: Optional[ResetRequest] = None):
    """Restablecer el mapeo por defecto"""
    service = CostCodeService(db)
    updated_by = data.updated_by if data else None
    return CostCodeMappingOut.from_mapping(service.reset_to_default(updated_by))


@cost_codes_router.get("/changes", response_model=ChangeLogList)
def list_changes(
    db: db_dependency,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0)
):
    """Listar el historial de cambios del mapeo, del más reciente al más antiguo"""
    service = CostCodeService(db)
    return service.list_changes(limit, offset)


@cost_codes_router.post("/encode", response_model=EncodeResponse)
def encode_cost(data: EncodeRequest, db: db_dependency):
    """
    Codificar un costo con el mapeo activo

    Los decimales se truncan y los costos negativos se codifican como 0.
    """
    service = CostCodeService(db)
    return {"cost": data.cost, "code": service.encode_cost(data.cost)}


@cost_codes_router.post("/decode", response_model=DecodeResponse)
def decode_code(data: DecodeRequest, db: db_dependency):
    """
    Decodificar un código de costo con el mapeo activo

    Un código inválido no es un error: se responde con valid=false y cost=null.
    """
    service = CostCodeService(db)
    cost = service.decode_code(data.code)
    return {"code": data.code, "cost": cost, "valid": cost is not None}


@cost_codes_router.get("/validate/{code}", response_model=ValidateResponse)
def validate_code(db: db_dependency, code: str = Path(..., max_length=100)):
    """Verificar si un código se puede decodificar con el mapeo activo"""
    service = CostCodeService(db)
    return {"code": code, "valid": service.validate_code(code)}


@cost_codes_router.get("/preview", response_model=PreviewResponse)
def preview(db: db_dependency):
    """Ejemplos de codificación (125, 1000, 500, 99, 1234) con el mapeo activo"""
    service = CostCodeService(db)
    return service.preview()
