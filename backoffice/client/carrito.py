from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from backoffice.shared.calculos_venta import (
    CERO, IVA_DEFECTO, Cupon, LineaVenta, PagoAsignado, ResumenPagos, ResumenVenta,
    a_decimal, ajustar_cantidad, calcular_pagos, calcular_resumen, expandir_metodo_combinado, redondear,
    monto_restante, pago_completo
)


@dataclass
class ItemCarrito:
    id_variante: int
    nombre_producto: str
    codigo_sku: str
    precio_unitario: Decimal
    cantidad: int
    stock: int
    descuento_linea: Decimal = CERO

    def a_linea(self) -> LineaVenta:
        return LineaVenta(
            id_variante=self.id_variante,
            cantidad=self.cantidad,
            precio_unitario=self.precio_unitario,
            descuento_linea=self.descuento_linea
        )


class CarritoVenta:
    """
    Estado del asistente de ventas: líneas, cupón, IVA y reparto de pagos.

    Los totales se recalculan en cada consulta con las mismas reglas que usa
    el servidor, de modo que lo mostrado coincide con lo que se registrará.
    """

    def __init__(self, metodos_pago: Optional[List[Dict[str, Any]]] = None):
        self.items: Dict[int, ItemCarrito] = {}
        self.cupon: Optional[Cupon] = None
        self.aplica_iva = False
        self.porcentaje_iva = IVA_DEFECTO
        self.pagos: Dict[int, PagoAsignado] = {}
        # Métodos disponibles tal como los entrega /metodos-pago
        self.metodos_pago = {m["idMetodoPago"]: m for m in (metodos_pago or [])}

    # ==================== LÍNEAS ====================

    def agregar_variante(self, variante: Dict[str, Any], cantidad: int = 1) -> ItemCarrito:
        """
        Agrega una variante del inventario. Si ya está en el carrito suma la
        cantidad; en ambos casos la cantidad queda limitada al stock.
        """
        stock = int(variante["cantidadStock"])
        if stock <= 0:
            raise ValueError(f"La variante {variante['codigoSku']} no tiene stock disponible")

        id_variante = variante["idVariante"]
        item = self.items.get(id_variante)
        if item:
            item.cantidad = ajustar_cantidad(item.cantidad + cantidad, stock)
            item.stock = stock
            return item

        item = ItemCarrito(
            id_variante=id_variante,
            nombre_producto=variante.get("nombreProducto") or "",
            codigo_sku=variante["codigoSku"],
            precio_unitario=a_decimal(variante["precio"]),
            cantidad=ajustar_cantidad(cantidad, stock),
            stock=stock
        )
        self.items[id_variante] = item
        return item

    def _item(self, id_variante: int) -> ItemCarrito:
        if id_variante not in self.items:
            raise KeyError(f"La variante {id_variante} no está en el carrito")
        return self.items[id_variante]

    def actualizar_cantidad(self, id_variante: int, cantidad: int) -> ItemCarrito:
        item = self._item(id_variante)
        item.cantidad = ajustar_cantidad(cantidad, item.stock)
        if item.descuento_linea > redondear(item.cantidad * item.precio_unitario):
            item.descuento_linea = CERO
        return item

    def actualizar_descuento_linea(self, id_variante: int, descuento) -> ItemCarrito:
        item = self._item(id_variante)
        descuento = a_decimal(descuento)
        if descuento < 0 or descuento > redondear(item.cantidad * item.precio_unitario):
            raise ValueError("El descuento de línea debe estar entre 0 y el subtotal de la línea")
        item.descuento_linea = descuento
        return item

    def quitar(self, id_variante: int) -> None:
        self.items.pop(id_variante, None)

    @property
    def vacio(self) -> bool:
        return not self.items

    # ==================== CUPÓN E IVA ====================

    def aplicar_cupon(self, validacion: Dict[str, Any]) -> Cupon:
        """Aplica el cupón a partir de la respuesta de /descuentos/validar"""
        if not validacion.get("valido"):
            raise ValueError(validacion.get("mensaje") or "Cupón no válido")
        descuento = validacion["descuento"]
        self.cupon = Cupon(
            tipo_descuento=descuento["tipoDescuento"],
            valor_descuento=descuento["valorDescuento"],
            codigo_descuento=descuento["codigoDescuento"]
        )
        return self.cupon

    def quitar_cupon(self) -> None:
        self.cupon = None

    def establecer_iva(self, aplica: bool, porcentaje=None) -> None:
        self.aplica_iva = aplica
        if porcentaje is not None:
            self.porcentaje_iva = a_decimal(porcentaje)

    # ==================== PAGOS ====================

    def _es_credito(self, id_metodo_pago: int) -> bool:
        metodo = self.metodos_pago.get(id_metodo_pago)
        return bool(metodo and metodo.get("esCredito"))

    def asignar_pago(self, id_metodo_pago: int, monto, referencia: Optional[str] = None) -> None:
        monto = a_decimal(monto)
        if monto < 0:
            raise ValueError("El monto del pago no puede ser negativo")
        self.pagos[id_metodo_pago] = PagoAsignado(
            id_metodo_pago=id_metodo_pago,
            monto=monto,
            es_credito=self._es_credito(id_metodo_pago),
            referencia=referencia
        )

    def quitar_pago(self, id_metodo_pago: int) -> None:
        self.pagos.pop(id_metodo_pago, None)

    def cubrir_restante(self, id_metodo_pago: int) -> Decimal:
        """Asigna al método lo que falta para cubrir el total con los demás pagos"""
        restante = monto_restante(self.resumen().total, self.pagos.values(), excluir=id_metodo_pago)
        anterior = self.pagos.get(id_metodo_pago)
        self.asignar_pago(id_metodo_pago, restante, anterior.referencia if anterior else None)
        return restante

    def seleccionar_metodo_combinado(self, nombre_metodo: str) -> List[int]:
        """
        Reparte un método combinado ("Efectivo + Transferencia") en sus
        métodos simples, que quedan en el carrito con monto cero.
        """
        por_nombre = {m["nombreMetodo"]: id_metodo for id_metodo, m in self.metodos_pago.items()}
        ids = expandir_metodo_combinado(nombre_metodo, por_nombre)
        if not ids:
            raise ValueError(f"No se encontraron métodos para '{nombre_metodo}'")
        for id_metodo in ids:
            if id_metodo not in self.pagos:
                self.asignar_pago(id_metodo, CERO)
        return ids

    # ==================== TOTALES ====================

    def resumen(self) -> ResumenVenta:
        return calcular_resumen(
            [item.a_linea() for item in self.items.values()],
            cupon=self.cupon,
            aplica_iva=self.aplica_iva,
            porcentaje_iva=self.porcentaje_iva
        )

    def resumen_pagos(self) -> ResumenPagos:
        return calcular_pagos(self.resumen().total, self.pagos.values())

    def pago_completo(self, tolerancia=None) -> bool:
        total = self.resumen().total
        if tolerancia is None:
            return pago_completo(total, self.pagos.values())
        return pago_completo(total, self.pagos.values(), tolerancia)

    # ==================== PAYLOAD ====================

    def construir_payload(
        self,
        id_usuario: int,
        id_usuario_vendedor: Optional[int] = None,
        id_estado_pedido: Optional[int] = None,
        notas: Optional[str] = None,
        direccion_entrega: Optional[str] = None
    ) -> Dict[str, Any]:
        """Cuerpo de POST /ventas en camelCase; los pagos en cero no se envían"""
        if self.vacio:
            raise ValueError("El carrito está vacío")
        pagos = [p for p in self.pagos.values() if p.monto > 0]
        if not pagos:
            raise ValueError("Debe asignar al menos un pago")

        payload = {
            "idUsuario": id_usuario,
            "detalleVentas": [
                {
                    "idVariante": item.id_variante,
                    "cantidad": item.cantidad,
                    "precioUnitario": float(item.precio_unitario),
                    "descuentoLinea": float(item.descuento_linea)
                }
                for item in self.items.values()
            ],
            "pagos": [
                {"idMetodoPago": p.id_metodo_pago, "monto": float(p.monto), "referencia": p.referencia}
                for p in pagos
            ],
            "aplicaIva": self.aplica_iva,
            "porcentajeIva": float(self.porcentaje_iva),
            "total": float(self.resumen().total)
        }
        opcionales = {
            "idUsuarioVendedor": id_usuario_vendedor,
            "idEstadoPedido": id_estado_pedido,
            "notas": notas,
            "direccionEntrega": direccion_entrega,
            "codigoDescuentoUsado": self.cupon.codigo_descuento if self.cupon else None
        }
        payload.update({clave: valor for clave, valor in opcionales.items() if valor is not None})
        return payload

    def limpiar(self) -> None:
        self.items.clear()
        self.pagos.clear()
        self.cupon = None
        self.aplica_iva = False
        self.porcentaje_iva = IVA_DEFECTO
