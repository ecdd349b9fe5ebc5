from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.config.database import get_db
from backoffice.core.auth.dependencies import ROLES_PERSONAL, get_current_user, require_roles
from backoffice.core.responses import respuesta_exitosa, respuesta_paginada
from backoffice.shared.database.models import Usuario
from backoffice.shared.schemas import PaginacionParams
from .service import VentasService
from .schemas import VentaCalculoRequest, VentaCreateRequest, EstadoVentaUpdate

router = APIRouter(prefix="/ventas", tags=["Ventas"])

ROLES_VENTA = ["Administrador", "Vendedor", "Cajero"]

# ==================== CONSULTAS ====================

@router.get("")
async def listar_ventas(
    busqueda: Optional[str] = Query(None, description="Número de factura, nombre o correo del cliente"),
    estado_pedido: Optional[int] = Query(None, alias="estadoPedido"),
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ventas más recientes primero; un cliente solo ve sus compras"""
    service = VentasService(db)
    ventas, total = await service.listar(
        busqueda, estado_pedido, paginacion.offset, paginacion.limite, current_user
    )
    return respuesta_paginada(ventas, total, paginacion.pagina, paginacion.limite, "Ventas obtenidas")

@router.get("/{id_venta}")
async def obtener_venta(
    id_venta: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = VentasService(db)
    return respuesta_exitosa(await service.obtener(id_venta, current_user), "Venta obtenida")

@router.get("/{id_venta}/pagos")
async def pagos_venta(
    id_venta: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = VentasService(db)
    return respuesta_exitosa(await service.pagos(id_venta, current_user), "Pagos de la venta")

# ==================== REGISTRO ====================

@router.post("/calcular")
async def calcular_venta(
    datos: VentaCalculoRequest,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Calcular subtotal, descuentos, IVA y reparto de pagos de un carrito
    sin registrar la venta.
    """
    service = VentasService(db)
    return respuesta_exitosa(await service.calcular(datos, current_user), "Cálculo de la venta")

@router.post("", status_code=201)
async def crear_venta(
    datos: VentaCreateRequest,
    current_user: Usuario = Depends(require_roles(ROLES_VENTA)),
    db: Session = Depends(get_db)
):
    """
    Registrar una venta.

    Incluye:
    - Recalculo de totales en el servidor (el total enviado se verifica)
    - Validación de stock, métodos de pago y cupón
    - Salida de inventario por línea
    - Pagos iniciales y crédito de tienda por la parte financiada
    """
    service = VentasService(db)
    return respuesta_exitosa(await service.crear_venta(datos, current_user), "Venta registrada exitosamente")

@router.patch("/{id_venta}/estado")
async def actualizar_estado_venta(
    id_venta: int,
    datos: EstadoVentaUpdate,
    current_user: Usuario = Depends(require_roles(["Administrador", "Vendedor"])),
    db: Session = Depends(get_db)
):
    service = VentasService(db)
    return respuesta_exitosa(
        await service.actualizar_estado(id_venta, datos.id_estado_pedido),
        "Estado de la venta actualizado"
    )

# ==================== PAGOS ====================

pagos_router = APIRouter(prefix="/pagos", tags=["Pagos"])

@pagos_router.get("")
async def listar_pagos(
    id_venta: Optional[int] = Query(None, alias="idVenta"),
    id_metodo_pago: Optional[int] = Query(None, alias="idMetodoPago"),
    tipo_pago: Optional[str] = Query(None, alias="tipoPago", description="inicial, abono o liquidacion"),
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(list(ROLES_PERSONAL))),
    db: Session = Depends(get_db)
):
    service = VentasService(db)
    pagos, total = await service.listar_pagos(
        id_venta, id_metodo_pago, tipo_pago, paginacion.offset, paginacion.limite
    )
    return respuesta_paginada(pagos, total, paginacion.pagina, paginacion.limite, "Pagos obtenidos")
