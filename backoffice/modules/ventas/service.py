import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Dict, Tuple
from sqlalchemy.orm import Session

from backoffice.config.settings import settings
from backoffice.core.auth.dependencies import ROLES_PERSONAL
from backoffice.core.exceptions import (
    ErrorAPI, ErrorNoEncontrado, ErrorProhibido, ErrorValidacion, ErrorInternoServidor
)
from backoffice.shared.calculos_venta import (
    LineaVenta, Cupon, PagoAsignado, ResumenVenta, ResumenPagos,
    calcular_resumen, calcular_pagos, a_decimal, redondear
)
from backoffice.shared.database.models import Descuento, MetodoPago, Usuario, VarianteProducto
from backoffice.modules.creditos.repository import CreditosRepository
from backoffice.modules.descuentos.service import DescuentosService
from backoffice.modules.inventario.repository import InventarioRepository
from backoffice.modules.metodos_pago.repository import MetodosPagoRepository
from backoffice.modules.usuarios.repository import UsuariosRepository
from .repository import VentasRepository
from .schemas import (
    VentaCalculoRequest, VentaCreateRequest,
    ResumenVentaResponse, ResumenPagosResponse, DescuentoAplicadoResponse, CalculoVentaResponse,
    VentaResumenResponse, VentaDetalleResponse, PagoResponse
)

logger = logging.getLogger(__name__)

DIFERENCIA_TOTAL_PERMITIDA = Decimal("1")


@dataclass
class CarritoValidado:
    """Resultado de validar y recalcular un carrito contra la base de datos"""
    lineas: List[LineaVenta]
    variantes: Dict[int, VarianteProducto]
    metodos: Dict[int, MetodoPago]
    pagos: List[PagoAsignado]
    resumen: ResumenVenta
    resumen_pagos: ResumenPagos
    descuento: Optional[Descuento] = None
    faltantes_stock: List[str] = field(default_factory=list)


class VentasService:
    """
    Registro y consulta de ventas.

    Los totales que envía la consola se recalculan aquí con calculos_venta;
    el servidor es la única fuente de verdad para descuentos, IVA y el reparto
    entre pago inmediato y crédito de tienda.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = VentasRepository(db)
        self.inventario = InventarioRepository(db)
        self.metodos = MetodosPagoRepository(db)
        self.usuarios = UsuariosRepository(db)
        self.creditos = CreditosRepository(db)
        self.descuentos = DescuentosService(db)

    # ==================== CÁLCULO ====================

    def _validar_carrito(self, datos: VentaCalculoRequest, id_cliente: Optional[int]) -> CarritoValidado:
        variantes = self.inventario.get_variantes_by_ids([d.id_variante for d in datos.detalle_ventas])

        lineas = []
        cantidades: Dict[int, int] = {}
        for detalle in datos.detalle_ventas:
            variante = variantes.get(detalle.id_variante)
            if not variante or not variante.activo:
                raise ErrorValidacion(f"Variante {detalle.id_variante} no encontrada o inactiva")
            cantidades[detalle.id_variante] = cantidades.get(detalle.id_variante, 0) + detalle.cantidad
            lineas.append(LineaVenta(
                id_variante=detalle.id_variante,
                cantidad=detalle.cantidad,
                precio_unitario=detalle.precio_unitario,
                descuento_linea=detalle.descuento_linea
            ))

        faltantes_stock = [
            f"{variantes[id_variante].codigo_sku}: disponible {variantes[id_variante].cantidad_stock}, solicitado {cantidad}"
            for id_variante, cantidad in cantidades.items()
            if cantidad > variantes[id_variante].cantidad_stock
        ]

        metodos = self.metodos.get_by_ids([p.id_metodo_pago for p in datos.pagos]) if datos.pagos else {}
        pagos = []
        for pago in datos.pagos:
            metodo = metodos.get(pago.id_metodo_pago)
            if not metodo or not metodo.activo:
                raise ErrorValidacion(f"Método de pago {pago.id_metodo_pago} no encontrado o inactivo")
            if metodo.tipo and metodo.tipo.codigo == "mixto":
                raise ErrorValidacion(
                    f"El método combinado '{metodo.nombre_metodo}' debe enviarse desglosado en sus métodos simples"
                )
            pagos.append(PagoAsignado(
                id_metodo_pago=pago.id_metodo_pago,
                monto=pago.monto,
                es_credito=metodo.es_credito,
                referencia=pago.referencia
            ))

        porcentaje_iva = datos.porcentaje_iva
        if porcentaje_iva is None:
            porcentaje_iva = a_decimal(settings.iva_porcentaje_defecto)

        descuento = None
        cupon = None
        if datos.codigo_descuento_usado:
            base = calcular_resumen(lineas).base_antes_cupon
            descuento, _ = self.descuentos.obtener_descuento_valido(
                datos.codigo_descuento_usado, base, id_cliente
            )
            cupon = Cupon(descuento.tipo_descuento, descuento.valor_descuento, descuento.codigo_descuento)

        resumen = calcular_resumen(lineas, cupon, datos.aplica_iva, porcentaje_iva)
        return CarritoValidado(
            lineas=lineas,
            variantes=variantes,
            metodos=metodos,
            pagos=pagos,
            resumen=resumen,
            resumen_pagos=calcular_pagos(resumen.total, pagos),
            descuento=descuento,
            faltantes_stock=faltantes_stock
        )

    def _to_calculo_response(self, carrito: CarritoValidado) -> CalculoVentaResponse:
        resumen = carrito.resumen
        pagos = carrito.resumen_pagos
        descuento = None
        if carrito.descuento:
            descuento = DescuentoAplicadoResponse(
                id_descuento=carrito.descuento.id_descuento,
                codigo_descuento=carrito.descuento.codigo_descuento,
                tipo_descuento=carrito.descuento.tipo_descuento,
                valor_descuento=carrito.descuento.valor_descuento,
                valor_aplicado=resumen.descuento_cupon
            )

        return CalculoVentaResponse(
            resumen=ResumenVentaResponse(
                subtotal=resumen.subtotal,
                descuentos_linea=resumen.descuentos_linea,
                base_antes_cupon=resumen.base_antes_cupon,
                descuento_cupon=resumen.descuento_cupon,
                base_imponible=resumen.base_imponible,
                impuestos=resumen.impuestos,
                total=resumen.total,
                descuento_total=resumen.descuento_total
            ),
            pagos=ResumenPagosResponse(
                total_asignado=pagos.total_asignado,
                monto_credito=pagos.monto_credito,
                monto_abonado=pagos.monto_abonado,
                faltante=pagos.faltante,
                cambio=pagos.cambio,
                tipo_venta=pagos.tipo_venta,
                modalidad=pagos.modalidad,
                pago_completo=pagos.faltante <= a_decimal(settings.tolerancia_pago)
            ),
            descuento=descuento
        )

    async def calcular(self, datos: VentaCalculoRequest, usuario: Usuario) -> CalculoVentaResponse:
        """Totales de un carrito sin registrar nada (vista previa del asistente)"""
        id_cliente = datos.id_usuario
        if usuario.nombre_rol not in ROLES_PERSONAL:
            id_cliente = usuario.id_usuario
        carrito = self._validar_carrito(datos, id_cliente)
        # la validación del cupón puede marcarlo como vencido
        self.db.commit()
        return self._to_calculo_response(carrito)

    # ==================== REGISTRO ====================

    async def crear_venta(self, datos: VentaCreateRequest, usuario: Usuario) -> VentaDetalleResponse:
        """
        Registrar una venta completa en una sola transacción:
        líneas, salida de inventario, pagos iniciales, crédito de tienda
        y uso del cupón.
        """
        cliente = self.usuarios.get_by_id(datos.id_usuario)
        if not cliente:
            raise ErrorNoEncontrado("Cliente no encontrado")
        if cliente.estado != "activo":
            raise ErrorValidacion("El cliente no está activo")

        id_vendedor = datos.id_usuario_vendedor or usuario.id_usuario
        if datos.id_usuario_vendedor and not self.usuarios.get_by_id(datos.id_usuario_vendedor):
            raise ErrorValidacion("Vendedor no encontrado")

        if datos.id_estado_pedido:
            estado = self.repository.get_estado(datos.id_estado_pedido)
            if not estado or not estado.activo:
                raise ErrorValidacion("Estado de pedido no válido")
        else:
            estado = self.repository.get_estado_inicial()
            if not estado:
                raise ErrorValidacion("No hay estados de pedido configurados")

        carrito = self._validar_carrito(datos, cliente.id_usuario)
        if carrito.faltantes_stock:
            raise ErrorValidacion("Stock insuficiente", errores=carrito.faltantes_stock)

        for pago in carrito.pagos:
            metodo = carrito.metodos[pago.id_metodo_pago]
            if metodo.requiere_referencia and not pago.referencia:
                raise ErrorValidacion(f"El método {metodo.nombre_metodo} requiere referencia")

        resumen = carrito.resumen
        resumen_pagos = carrito.resumen_pagos

        if datos.total is not None and abs(datos.total - resumen.total) > DIFERENCIA_TOTAL_PERMITIDA:
            raise ErrorValidacion(
                f"El total enviado ({datos.total}) no coincide con el calculado ({resumen.total})",
                errores={"totalCalculado": resumen.total}
            )

        if resumen_pagos.faltante > a_decimal(settings.tolerancia_pago):
            raise ErrorValidacion(
                f"Venta incompleta: faltan {resumen_pagos.faltante} por asignar",
                errores={"faltante": resumen_pagos.faltante}
            )

        if resumen_pagos.monto_credito > 0 and resumen_pagos.cambio > 0:
            raise ErrorValidacion("Con crédito de tienda los pagos no pueden superar el total de la venta")

        try:
            ahora = datetime.now()
            total = resumen.total
            # el excedente en efectivo es cambio, no pago
            pagado = min(resumen_pagos.monto_abonado, total)
            saldo_pendiente = redondear(total - pagado)

            if saldo_pendiente <= 0:
                estado_pago = "pagado"
            elif pagado > 0:
                estado_pago = "parcial"
            else:
                estado_pago = "pendiente"

            venta = self.repository.create_venta({
                "numero_factura": self.repository.generar_numero_factura(),
                "id_usuario": cliente.id_usuario,
                "id_usuario_vendedor": id_vendedor,
                "id_estado_pedido": estado.id_estado_pedido,
                "fecha_venta": ahora,
                "subtotal": resumen.subtotal,
                "descuento_total": resumen.descuento_total,
                "impuestos": resumen.impuestos,
                "total": total,
                "total_pagado": pagado,
                "saldo_pendiente": saldo_pendiente,
                "estado_pago": estado_pago,
                "tipo_venta": resumen_pagos.tipo_venta,
                "notas": datos.notas,
                "direccion_entrega": datos.direccion_entrega,
                "id_descuento": carrito.descuento.id_descuento if carrito.descuento else None,
                "codigo_descuento_usado": carrito.descuento.codigo_descuento if carrito.descuento else None
            })

            # 1. Líneas y salida de inventario
            for linea in carrito.lineas:
                self.repository.create_detalle({
                    "id_venta": venta.id_venta,
                    "id_variante": linea.id_variante,
                    "cantidad": linea.cantidad,
                    "precio_unitario": linea.precio_unitario,
                    "subtotal": linea.subtotal,
                    "descuento_linea": linea.descuento_linea,
                    "total_linea": linea.total_linea
                })
                self.inventario.registrar_movimiento(
                    carrito.variantes[linea.id_variante],
                    -linea.cantidad,
                    "venta",
                    f"Venta {venta.numero_factura}",
                    id_venta=venta.id_venta,
                    id_usuario=usuario.id_usuario
                )

            # 2. Pagos con dinero recibido, encadenando el saldo
            saldo = total
            for pago in carrito.pagos:
                if pago.es_credito:
                    continue
                saldo_nuevo = max(Decimal("0"), redondear(saldo - pago.monto))
                self.repository.create_pago({
                    "id_venta": venta.id_venta,
                    "id_metodo_pago": pago.id_metodo_pago,
                    "monto": pago.monto,
                    "referencia": pago.referencia,
                    "tipo_pago": "inicial",
                    "saldo_anterior": saldo,
                    "saldo_nuevo": saldo_nuevo,
                    "id_usuario_registro": usuario.id_usuario,
                    "fecha_pago": ahora
                })
                saldo = saldo_nuevo

            # 3. Parte financiada con crédito de tienda
            if resumen_pagos.monto_credito > 0:
                # el crédito absorbe el faltante tolerado para que ambos saldos coincidan
                monto_credito = saldo_pendiente
                self.creditos.create({
                    "id_venta": venta.id_venta,
                    "id_usuario": cliente.id_usuario,
                    "monto_inicial": pagado,
                    "monto_credito": monto_credito,
                    "monto_total": monto_credito,
                    "total_abonado": Decimal("0"),
                    "saldo_pendiente": monto_credito,
                    "fecha_inicio": ahora,
                    "fecha_vencimiento": ahora + timedelta(days=settings.dias_vencimiento_credito),
                    "estado": "activo"
                })
                self.creditos.registrar_credito_en_resumen(cliente.id_usuario, monto_credito, ahora)

            # 4. Uso del cupón
            if carrito.descuento:
                self.descuentos.repository.registrar_uso(
                    carrito.descuento,
                    cliente.id_usuario,
                    venta.id_venta,
                    monto_compra=resumen.base_antes_cupon,
                    valor_aplicado=resumen.descuento_cupon
                )

            self.db.commit()
            logger.info(
                f"Venta {venta.numero_factura} registrada - total {total}"
                f" - {resumen_pagos.modalidad}"
            )

            return VentaDetalleResponse.model_validate(self.repository.get_by_id(venta.id_venta))

        except ErrorAPI:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error registrando venta: {e}")
            raise ErrorInternoServidor("Error registrando venta")

    # ==================== CONSULTAS ====================

    def _get_venta_autorizada(self, id_venta: int, usuario: Usuario):
        venta = self.repository.get_by_id(id_venta)
        if not venta:
            raise ErrorNoEncontrado("Venta no encontrada")
        if usuario.nombre_rol not in ROLES_PERSONAL and venta.id_usuario != usuario.id_usuario:
            raise ErrorProhibido("No tiene acceso a esta venta")
        return venta

    async def listar(
        self,
        busqueda: Optional[str],
        id_estado_pedido: Optional[int],
        offset: int,
        limit: int,
        usuario: Usuario
    ) -> Tuple[List[VentaResumenResponse], int]:
        # los clientes solo ven sus compras
        id_usuario = None if usuario.nombre_rol in ROLES_PERSONAL else usuario.id_usuario
        ventas, total = self.repository.list_ventas(busqueda, id_estado_pedido, id_usuario, offset, limit)
        return [VentaResumenResponse.model_validate(v) for v in ventas], total

    async def obtener(self, id_venta: int, usuario: Usuario) -> VentaDetalleResponse:
        return VentaDetalleResponse.model_validate(self._get_venta_autorizada(id_venta, usuario))

    async def pagos(self, id_venta: int, usuario: Usuario) -> List[PagoResponse]:
        self._get_venta_autorizada(id_venta, usuario)
        return [PagoResponse.model_validate(p) for p in self.repository.list_pagos(id_venta)]

    async def actualizar_estado(self, id_venta: int, id_estado_pedido: int) -> VentaResumenResponse:
        venta = self.repository.get_by_id(id_venta)
        if not venta:
            raise ErrorNoEncontrado("Venta no encontrada")

        estado = self.repository.get_estado(id_estado_pedido)
        if not estado or not estado.activo:
            raise ErrorValidacion("Estado de pedido no válido")

        anterior = venta.nombre_estado
        venta.id_estado_pedido = estado.id_estado_pedido
        self.db.commit()
        self.db.refresh(venta)
        logger.info(f"Venta {venta.numero_factura}: {anterior} -> {estado.nombre_estado}")
        return VentaResumenResponse.model_validate(venta)

    async def listar_pagos(
        self,
        id_venta: Optional[int],
        id_metodo_pago: Optional[int],
        tipo_pago: Optional[str],
        offset: int,
        limit: int
    ) -> Tuple[List[PagoResponse], int]:
        """Todos los pagos recibidos (iniciales, abonos y liquidaciones)"""
        pagos, total = self.repository.list_pagos_filtrados(id_venta, id_metodo_pago, tipo_pago, offset, limit)
        return [PagoResponse.model_validate(p) for p in pagos], total
