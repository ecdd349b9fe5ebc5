from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.config.database import get_db
from backoffice.core.auth.dependencies import require_roles
from backoffice.core.responses import respuesta_exitosa, respuesta_paginada
from backoffice.shared.database.models import Usuario
from backoffice.shared.schemas import PaginacionParams
from backoffice.modules.creditos.schemas import EstadoCredito
from .service import ReportesService
from .schemas import RangoDashboard, TipoReporteInventario

router = APIRouter(prefix="/reportes", tags=["Reportes"])

ROLES_REPORTES = ["Administrador", "Gerente"]

@router.get("/dashboard")
async def dashboard(
    rango: RangoDashboard = Query(RangoDashboard.dia, description="dia, semana o mes"),
    current_user: Usuario = Depends(require_roles(ROLES_REPORTES)),
    db: Session = Depends(get_db)
):
    """
    Indicadores del periodo: ventas, recaudo, cartera, nuevos clientes,
    productos más vendidos, ventas por día e inventario.
    """
    service = ReportesService(db)
    return respuesta_exitosa(await service.dashboard(rango), "Dashboard generado")

@router.get("/ventas")
async def reporte_ventas(
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    id_estado_pedido: Optional[int] = Query(None, alias="idEstadoPedido"),
    id_usuario: Optional[int] = Query(None, alias="idUsuario"),
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(ROLES_REPORTES)),
    db: Session = Depends(get_db)
):
    service = ReportesService(db)
    ventas, total, extra = await service.reporte_ventas(
        fecha_inicio, fecha_fin, id_estado_pedido, id_usuario,
        paginacion.offset, paginacion.limite
    )
    return respuesta_paginada(
        ventas, total, paginacion.pagina, paginacion.limite, "Reporte de ventas generado", extra
    )

@router.get("/creditos")
async def reporte_creditos(
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    estado: Optional[EstadoCredito] = Query(None),
    solo_vencidos: bool = Query(False, alias="soloVencidos"),
    id_usuario: Optional[int] = Query(None, alias="idUsuario"),
    current_user: Usuario = Depends(require_roles(ROLES_REPORTES)),
    db: Session = Depends(get_db)
):
    """Cartera de créditos: KPIs, porcentaje de recuperación, distribución por estado y evolución mensual"""
    service = ReportesService(db)
    reporte = await service.reporte_creditos(
        fecha_inicio, fecha_fin, estado.value if estado else None, solo_vencidos, id_usuario
    )
    return respuesta_exitosa(reporte, "Reporte de créditos generado")

@router.get("/inventario")
async def reporte_inventario(
    tipo_reporte: TipoReporteInventario = Query(TipoReporteInventario.valoracion, alias="tipoReporte"),
    current_user: Usuario = Depends(require_roles(ROLES_REPORTES)),
    db: Session = Depends(get_db)
):
    service = ReportesService(db)
    return respuesta_exitosa(await service.reporte_inventario(tipo_reporte), "Reporte de inventario generado")
