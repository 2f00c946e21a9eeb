from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime, timezone
from typing import List, Optional
import logging

from app.core.config import settings
from app.modules.cost_codes.codec import CostCodeMapping, Cost, InvalidCostCodeMapping
from app.modules.cost_codes.models import CostCodeSetting, CostCodeChangeLog, CostCodeAction
from app.modules.cost_codes.schemas import CostCodeMappingIn

logger = logging.getLogger(__name__)


class CostCodeService:
    def __init__(self, db: Session):
        self.db = db

    def _get_setting(self) -> Optional[CostCodeSetting]:
        return self.db.query(CostCodeSetting).filter(
            CostCodeSetting.key == settings.COST_CODE_SETTINGS_KEY
        ).first()

    def get_mapping(self) -> CostCodeMapping:
        """Obtener el mapeo activo (el mapeo por defecto si no hay uno guardado)"""
        try:
            setting = self._get_setting()
        except SQLAlchemyError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al obtener el mapeo de códigos de costo: {str(e)}"
            )

        if not setting:
            return CostCodeMapping.default()

        try:
            return setting.to_mapping()
        except InvalidCostCodeMapping as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"El mapeo guardado no es válido: {str(e)}"
            )

    def _active_mapping_or_default(self) -> CostCodeMapping:
        # Codificar/decodificar nunca falla por problemas de almacenamiento
        try:
            return self.get_mapping()
        except HTTPException as e:
            logger.warning(f"Using default cost code mapping: {e.detail}")
            return CostCodeMapping.default()

    def _save_mapping(self, mapping: CostCodeMapping, action: CostCodeAction, updated_by: Optional[str]) -> CostCodeMapping:
        now = datetime.now(timezone.utc)
        mapping = mapping.replace(updated_at=now, updated_by=updated_by)

        try:
            setting = self._get_setting()
            if not setting:
                setting = CostCodeSetting(key=settings.COST_CODE_SETTINGS_KEY)
                self.db.add(setting)

            setting.apply_mapping(mapping)
            setting.updated_at = now

            self.db.add(CostCodeChangeLog(
                action=action,
                user_id=updated_by,
                snapshot=mapping.to_dict(),
                created_at=now
            ))

            self.db.commit()
            self.db.refresh(setting)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al guardar el mapeo de códigos de costo: {str(e)}"
            )

        logger.info(f"Cost code mapping {action.value} by {updated_by or 'unknown user'}")
        return mapping

    def update_mapping(self, data: CostCodeMappingIn, updated_by: Optional[str] = None) -> CostCodeMapping:
        """Guardar un nuevo mapeo y registrar el cambio"""
        try:
            mapping = data.to_mapping()
        except InvalidCostCodeMapping as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(e)
            )

        return self._save_mapping(mapping, CostCodeAction.UPDATED, updated_by or data.updated_by)

    def reset_to_default(self, updated_by: Optional[str] = None) -> CostCodeMapping:
        """Restablecer el mapeo por defecto (sin cambios si ya está activo)"""
        current = self.get_mapping()
        if current.is_default():
            logger.info("Cost code mapping already uses the default values")
            return current

        return self._save_mapping(CostCodeMapping.default(), CostCodeAction.RESET, updated_by)

    def list_changes(self, limit: int = 20, offset: int = 0) -> dict:
        """Obtener el historial de cambios, del más reciente al más antiguo"""
        try:
            query = self.db.query(CostCodeChangeLog)
            total = query.count()
            changes = query.order_by(
                CostCodeChangeLog.created_at.desc()
            ).offset(offset).limit(limit).all()
        except SQLAlchemyError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al obtener el historial de cambios: {str(e)}"
            )

        return {
            "changes": changes,
            "total": total,
            "limit": limit,
            "offset": offset
        }

    def encode_cost(self, cost: Cost) -> str:
        try:
            return self._active_mapping_or_default().encode(cost)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(e)
            )

    def decode_code(self, code: str) -> Optional[int]:
        return self._active_mapping_or_default().decode(code)

    def validate_code(self, code: str) -> bool:
        return self._active_mapping_or_default().is_valid_code(code)

    def preview(self, costs: Optional[List[int]] = None) -> dict:
        """Codificar costos de ejemplo con el mapeo activo"""
        mapping = self._active_mapping_or_default()
        costs = settings.COST_CODE_PREVIEW_VALUES if costs is None else costs

        return {
            "rows": [{"cost": cost, "code": mapping.encode(cost)} for cost in costs],
            "is_default": mapping.is_default()
        }
