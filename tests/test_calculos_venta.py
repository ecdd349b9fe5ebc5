"""Tests del motor de cálculo de ventas: totales, cupones, IVA y reparto de pagos."""

from decimal import Decimal

import pytest

from backoffice.shared.calculos_venta import (
    Cupon, LineaVenta, PagoAsignado, ajustar_cantidad, calcular_pagos, calcular_resumen,
    expandir_metodo_combinado, monto_restante, pago_completo, valor_cupon
)


def test_linea_subtotal_y_total():
    linea = LineaVenta(id_variante=1, cantidad=3, precio_unitario="19999.99", descuento_linea="0.97")
    assert linea.subtotal == Decimal("59999.97")
    assert linea.total_linea == Decimal("59999.00")


@pytest.mark.parametrize("cantidad,precio,descuento", [
    (0, "100", "0"),
    (1, "-1", "0"),
    (1, "100", "101"),
    (1, "100", "-5"),
])
def test_linea_invalida(cantidad, precio, descuento):
    with pytest.raises(ValueError):
        LineaVenta(id_variante=1, cantidad=cantidad, precio_unitario=precio, descuento_linea=descuento)


def test_resumen_sin_cupon_ni_iva():
    lineas = [
        LineaVenta(1, 2, Decimal("50000"), Decimal("5000")),
        LineaVenta(2, 1, Decimal("30000")),
    ]
    resumen = calcular_resumen(lineas)
    assert resumen.subtotal == Decimal("130000.00")
    assert resumen.descuentos_linea == Decimal("5000.00")
    assert resumen.base_antes_cupon == Decimal("125000.00")
    assert resumen.descuento_cupon == Decimal("0")
    assert resumen.impuestos == Decimal("0")
    assert resumen.total == Decimal("125000.00")


def test_resumen_con_cupon_porcentual_e_iva():
    lineas = [LineaVenta(1, 2, Decimal("50000"))]
    resumen = calcular_resumen(lineas, Cupon("porcentaje", Decimal("10")), aplica_iva=True, porcentaje_iva=19)
    assert resumen.descuento_cupon == Decimal("10000.00")
    assert resumen.base_imponible == Decimal("90000.00")
    assert resumen.impuestos == Decimal("17100.00")
    assert resumen.total == Decimal("107100.00")
    assert resumen.descuento_total == Decimal("10000.00")


def test_cupon_valor_fijo_no_supera_la_base():
    assert valor_cupon(Cupon("valor_fijo", Decimal("80000")), Decimal("50000")) == Decimal("50000.00")
    resumen = calcular_resumen([LineaVenta(1, 1, Decimal("50000"))], Cupon("valor_fijo", Decimal("80000")))
    assert resumen.total == Decimal("0.00")


def test_cupon_tipo_invalido():
    with pytest.raises(ValueError):
        Cupon("regalo", Decimal("10"))


def test_pagos_contado_con_cambio():
    resumen = calcular_pagos(Decimal("100000"), [PagoAsignado(1, Decimal("120000"))])
    assert resumen.modalidad == "Contado"
    assert resumen.tipo_venta == "contado"
    assert resumen.cambio == Decimal("20000.00")
    assert resumen.faltante == Decimal("0.00")


def test_pagos_mixto_con_credito():
    pagos = [
        PagoAsignado(1, Decimal("40000")),
        PagoAsignado(7, Decimal("60000"), es_credito=True),
    ]
    resumen = calcular_pagos(Decimal("100000"), pagos)
    assert resumen.modalidad == "Mixto"
    assert resumen.tipo_venta == "credito"
    assert resumen.monto_credito == Decimal("60000.00")
    assert resumen.monto_abonado == Decimal("40000.00")
    assert resumen.faltante == Decimal("0.00")


def test_pagos_en_cero_se_ignoran():
    resumen = calcular_pagos(Decimal("1000"), [PagoAsignado(1, 0), PagoAsignado(7, Decimal("1000"), es_credito=True)])
    assert resumen.modalidad == "Crédito"
    assert len(resumen.pagos) == 1


def test_pago_completo_respeta_tolerancia():
    assert pago_completo(Decimal("100000"), [PagoAsignado(1, Decimal("99900"))])
    assert not pago_completo(Decimal("100000"), [PagoAsignado(1, Decimal("99899"))])
    assert pago_completo(Decimal("100000"), [PagoAsignado(1, Decimal("99000"))], tolerancia=1000)


def test_monto_restante_excluye_el_metodo():
    pagos = [PagoAsignado(1, Decimal("30000")), PagoAsignado(2, Decimal("50000"))]
    assert monto_restante(Decimal("100000"), pagos, excluir=2) == Decimal("70000.00")
    assert monto_restante(Decimal("100000"), pagos) == Decimal("20000.00")
    assert monto_restante(Decimal("10000"), pagos) == Decimal("0.00")


def test_ajustar_cantidad():
    assert ajustar_cantidad(0, 5) == 1
    assert ajustar_cantidad(8, 5) == 5
    assert ajustar_cantidad(3, 5) == 3


def test_expandir_metodo_combinado():
    metodos = {"Efectivo": 1, "Tarjeta Crédito": 2, "PSE": 4, "Crédito Tienda": 7}
    assert expandir_metodo_combinado("Efectivo + Crédito", metodos) == [1, 7]
    assert expandir_metodo_combinado("Efectivo + Tarjeta", metodos) == [1, 2]
    assert expandir_metodo_combinado("Transferencia + Crédito", metodos) == [4, 7]
    assert expandir_metodo_combinado("Efectivo", metodos) == [1]
    assert expandir_metodo_combinado("Bitcoin", metodos) == []
