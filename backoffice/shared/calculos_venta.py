"""
Cálculos de una venta: subtotal de líneas, descuentos por línea, cupón,
IVA y reparto del pago entre varios métodos (incluido el crédito de tienda).

Módulo sin dependencias de base de datos ni de configuración para que
el servidor y el cliente (CarritoVenta) usen exactamente la misma aritmética.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

CENTAVOS = Decimal("0.01")
CERO = Decimal("0")
TOLERANCIA_PAGO = Decimal("100")
IVA_DEFECTO = Decimal("19")

TIPO_PORCENTAJE = "porcentaje"
TIPO_VALOR_FIJO = "valor_fijo"


def a_decimal(valor) -> Decimal:
    if valor is None:
        return CERO
    if isinstance(valor, Decimal):
        return valor
    return Decimal(str(valor))


def redondear(valor) -> Decimal:
    return a_decimal(valor).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


# ==================== TIPOS ====================

@dataclass
class LineaVenta:
    id_variante: int
    cantidad: int
    precio_unitario: Decimal
    descuento_linea: Decimal = CERO

    def __post_init__(self):
        self.precio_unitario = a_decimal(self.precio_unitario)
        self.descuento_linea = a_decimal(self.descuento_linea)
        if self.cantidad < 1:
            raise ValueError("La cantidad debe ser mayor a 0")
        if self.precio_unitario < 0:
            raise ValueError("El precio unitario no puede ser negativo")
        if self.descuento_linea < 0 or self.descuento_linea > self.subtotal:
            raise ValueError("El descuento de línea debe estar entre 0 y el subtotal de la línea")

    @property
    def subtotal(self) -> Decimal:
        return redondear(self.cantidad * self.precio_unitario)

    @property
    def total_linea(self) -> Decimal:
        return redondear(self.subtotal - self.descuento_linea)


@dataclass
class Cupon:
    tipo_descuento: str
    valor_descuento: Decimal
    codigo_descuento: Optional[str] = None

    def __post_init__(self):
        self.valor_descuento = a_decimal(self.valor_descuento)
        if self.tipo_descuento not in (TIPO_PORCENTAJE, TIPO_VALOR_FIJO):
            raise ValueError(f"Tipo de descuento inválido: {self.tipo_descuento}")
        if self.valor_descuento < 0:
            raise ValueError("El valor del descuento no puede ser negativo")


@dataclass
class PagoAsignado:
    id_metodo_pago: int
    monto: Decimal
    es_credito: bool = False
    referencia: Optional[str] = None

    def __post_init__(self):
        self.monto = a_decimal(self.monto)


@dataclass
class ResumenVenta:
    subtotal: Decimal
    descuentos_linea: Decimal
    base_antes_cupon: Decimal
    descuento_cupon: Decimal
    base_imponible: Decimal
    impuestos: Decimal
    total: Decimal

    @property
    def descuento_total(self) -> Decimal:
        return redondear(self.descuentos_linea + self.descuento_cupon)


@dataclass
class ResumenPagos:
    total_asignado: Decimal
    monto_credito: Decimal
    monto_abonado: Decimal
    faltante: Decimal
    cambio: Decimal
    tipo_venta: str
    modalidad: str
    pagos: List[PagoAsignado] = field(default_factory=list)


# ==================== TOTALES ====================

def valor_cupon(cupon: Optional[Cupon], base) -> Decimal:
    """
    Valor monetario del cupón sobre la base (subtotal menos descuentos de línea).
    Nunca supera la base.
    """
    base = a_decimal(base)
    if cupon is None or base <= 0:
        return CERO
    if cupon.tipo_descuento == TIPO_PORCENTAJE:
        valor = base * cupon.valor_descuento / Decimal("100")
    else:
        valor = cupon.valor_descuento
    return redondear(min(valor, base))


def calcular_resumen(
    lineas: Iterable[LineaVenta],
    cupon: Optional[Cupon] = None,
    aplica_iva: bool = False,
    porcentaje_iva=IVA_DEFECTO
) -> ResumenVenta:
    lineas = list(lineas)
    subtotal = redondear(sum((linea.subtotal for linea in lineas), CERO))
    descuentos_linea = redondear(sum((linea.descuento_linea for linea in lineas), CERO))
    base_antes_cupon = redondear(subtotal - descuentos_linea)
    descuento_cupon = valor_cupon(cupon, base_antes_cupon)
    base_imponible = redondear(base_antes_cupon - descuento_cupon)

    impuestos = CERO
    if aplica_iva:
        impuestos = redondear(base_imponible * a_decimal(porcentaje_iva) / Decimal("100"))

    return ResumenVenta(
        subtotal=subtotal,
        descuentos_linea=descuentos_linea,
        base_antes_cupon=base_antes_cupon,
        descuento_cupon=descuento_cupon,
        base_imponible=base_imponible,
        impuestos=redondear(impuestos),
        total=redondear(base_imponible + impuestos)
    )


# ==================== PAGOS ====================

def calcular_pagos(total, pagos: Iterable[PagoAsignado]) -> ResumenPagos:
    total = a_decimal(total)
    pagos = [pago for pago in pagos if pago.monto > 0]

    total_asignado = redondear(sum((pago.monto for pago in pagos), CERO))
    monto_credito = redondear(sum((pago.monto for pago in pagos if pago.es_credito), CERO))
    monto_abonado = redondear(total_asignado - monto_credito)

    if monto_credito > 0 and monto_abonado > 0:
        modalidad = "Mixto"
    elif monto_credito > 0:
        modalidad = "Crédito"
    else:
        modalidad = "Contado"

    return ResumenPagos(
        total_asignado=total_asignado,
        monto_credito=monto_credito,
        monto_abonado=monto_abonado,
        faltante=redondear(max(CERO, total - total_asignado)),
        cambio=redondear(max(CERO, total_asignado - total)),
        tipo_venta="credito" if monto_credito > 0 else "contado",
        modalidad=modalidad,
        pagos=pagos
    )


def pago_completo(total, pagos: Iterable[PagoAsignado], tolerancia=TOLERANCIA_PAGO) -> bool:
    """Una venta puede registrarse cuando lo que falta no supera la tolerancia"""
    return calcular_pagos(total, pagos).faltante <= a_decimal(tolerancia)


def monto_restante(total, pagos: Iterable[PagoAsignado], excluir: Optional[int] = None) -> Decimal:
    """
    Lo que falta para cubrir el total sin contar el método `excluir`.
    Es el valor que toma un método al pulsar "Cubrir".
    """
    otros = sum(
        (pago.monto for pago in pagos if pago.id_metodo_pago != excluir),
        CERO
    )
    return redondear(max(CERO, a_decimal(total) - otros))


# ==================== UTILIDADES DEL CARRITO ====================

def ajustar_cantidad(cantidad: int, stock: int) -> int:
    """Limita la cantidad pedida al rango [1, stock]"""
    return max(1, min(int(cantidad), int(stock)))


def expandir_metodo_combinado(nombre_metodo: str, metodos: Dict[str, int]) -> List[int]:
    """
    Un método combinado como "Efectivo + Crédito" se reparte entre sus métodos
    simples. `metodos` mapea nombre -> id de los métodos disponibles.
    Retorna los ids encontrados, en el orden del nombre.
    """
    if "+" not in nombre_metodo:
        return [metodos[nombre_metodo]] if nombre_metodo in metodos else []

    ids = []
    for parte in (p.strip() for p in nombre_metodo.split("+")):
        if parte == "Crédito":
            parte = "Crédito Tienda"
        elif parte == "Tarjeta":
            parte = "Tarjeta Crédito"
        elif parte == "Transferencia" and parte not in metodos:
            parte = "PSE"
        if parte in metodos and metodos[parte] not in ids:
            ids.append(metodos[parte])
    return ids
