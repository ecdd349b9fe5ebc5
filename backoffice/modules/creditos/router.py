from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.config.database import get_db
from backoffice.core.auth.dependencies import ROLES_PERSONAL, get_current_user, require_roles
from backoffice.core.responses import respuesta_exitosa, respuesta_paginada
from backoffice.shared.database.models import Usuario
from backoffice.shared.schemas import PaginacionParams
from .service import CreditosService
from .schemas import AbonoCreditoRequest, AbonoVentaCreditoRequest, EstadoCredito, PagoAbonoRequest

router = APIRouter(prefix="/creditos", tags=["Créditos"])
ventas_credito_router = APIRouter(prefix="/ventas-credito", tags=["Ventas a Crédito"])

ROLES_CARTERA = list(ROLES_PERSONAL)
ROLES_ABONO = ["Administrador", "Cajero"]

# ==================== CRÉDITOS ====================

@router.get("")
async def listar_creditos(
    estado: Optional[EstadoCredito] = Query(None),
    id_usuario: Optional[int] = Query(None, alias="idUsuario"),
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(ROLES_CARTERA)),
    db: Session = Depends(get_db)
):
    service = CreditosService(db)
    creditos, total = await service.listar(
        estado.value if estado else None, id_usuario, paginacion.offset, paginacion.limite
    )
    return respuesta_paginada(creditos, total, paginacion.pagina, paginacion.limite, "Créditos obtenidos")

@router.get("/cliente/{id_usuario}")
async def creditos_cliente(
    id_usuario: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Resumen y créditos de un cliente; un cliente solo puede consultar los suyos"""
    service = CreditosService(db)
    return respuesta_exitosa(await service.creditos_cliente(id_usuario, current_user), "Créditos del cliente")

@router.get("/{id_credito}")
async def obtener_credito(
    id_credito: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CreditosService(db)
    return respuesta_exitosa(await service.obtener(id_credito, current_user), "Crédito obtenido")

@router.post("/{id_credito}/abonos", status_code=201)
async def registrar_abono(
    id_credito: int,
    datos: AbonoCreditoRequest,
    current_user: Usuario = Depends(require_roles(ROLES_ABONO)),
    db: Session = Depends(get_db)
):
    """
    Registrar un abono al crédito.

    Acepta una lista de pagos (varios métodos) o un único monto con su método.
    El total no puede superar el saldo pendiente.
    """
    service = CreditosService(db)
    resultado = await service.abonar(id_credito, datos.lista_pagos(), datos.notas, current_user)
    return respuesta_exitosa(resultado, "Abono registrado exitosamente")

# ==================== VENTAS A CRÉDITO ====================

@ventas_credito_router.get("")
async def listar_ventas_credito(
    paginacion: PaginacionParams = Depends(),
    current_user: Usuario = Depends(require_roles(["Administrador"])),
    db: Session = Depends(get_db)
):
    service = CreditosService(db)
    ventas, total = await service.listar_ventas_credito(paginacion.offset, paginacion.limite)
    return respuesta_paginada(ventas, total, paginacion.pagina, paginacion.limite, "Ventas a crédito obtenidas")

@ventas_credito_router.post("/{id_venta}/abono", status_code=201)
async def abonar_venta_credito(
    id_venta: int,
    datos: AbonoVentaCreditoRequest,
    current_user: Usuario = Depends(require_roles(ROLES_ABONO)),
    db: Session = Depends(get_db)
):
    service = CreditosService(db)
    pago = PagoAbonoRequest(
        id_metodo_pago=datos.id_metodo_pago,
        monto=datos.monto,
        referencia=datos.referencia
    )
    resultado = await service.abonar_por_venta(id_venta, [pago], datos.notas, current_user)
    return respuesta_exitosa(resultado, "Abono registrado exitosamente")
