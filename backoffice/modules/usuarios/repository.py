from typing import List, Optional, Tuple, Dict, Any
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_, desc, case

from backoffice.shared.database.models import (
    Usuario, Rol, Venta, Credito, ClienteCreditoResumen, HistorialDescuento
)

class UsuariosRepository:
    """
    Repositorio de usuarios, roles y datos agregados por cliente
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== ROLES ====================

    def get_rol_by_id(self, id_rol: int) -> Optional[Rol]:
        return self.db.query(Rol).filter(Rol.id_rol == id_rol).first()

    def get_rol_by_nombre(self, nombre_rol: str) -> Optional[Rol]:
        return self.db.query(Rol).filter(Rol.nombre_rol == nombre_rol).first()

    # ==================== USUARIOS ====================

    def get_by_id(self, id_usuario: int) -> Optional[Usuario]:
        return self.db.query(Usuario).options(joinedload(Usuario.rol)).filter(
            Usuario.id_usuario == id_usuario
        ).first()

    def get_by_usuario(self, usuario: str) -> Optional[Usuario]:
        return self.db.query(Usuario).filter(Usuario.usuario == usuario).first()

    def get_by_correo(self, correo: str) -> Optional[Usuario]:
        return self.db.query(Usuario).filter(
            Usuario.correo_electronico == correo.lower()
        ).first()

    def get_by_identificador(self, identificador: str) -> Optional[Usuario]:
        """Buscar por nombre de usuario o correo electrónico"""
        return self.db.query(Usuario).options(joinedload(Usuario.rol)).filter(
            or_(
                Usuario.usuario == identificador,
                Usuario.correo_electronico == identificador.lower()
            )
        ).first()

    def count_usuarios(self) -> int:
        return self.db.query(func.count(Usuario.id_usuario)).scalar() or 0

    def list_usuarios(
        self,
        nombre: Optional[str] = None,
        correo: Optional[str] = None,
        rol: Optional[str] = None,
        estado: Optional[str] = None,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[Usuario], int]:
        query = self.db.query(Usuario).join(Rol).options(joinedload(Usuario.rol))

        if nombre:
            patron = f"%{nombre}%"
            query = query.filter(or_(
                Usuario.nombres.ilike(patron),
                Usuario.apellidos.ilike(patron),
                Usuario.usuario.ilike(patron)
            ))
        if correo:
            query = query.filter(Usuario.correo_electronico.ilike(f"%{correo}%"))
        if rol:
            query = query.filter(Rol.nombre_rol == rol)
        if estado:
            query = query.filter(Usuario.estado == estado)
        else:
            query = query.filter(Usuario.estado != "eliminado")

        total = query.count()
        usuarios = query.order_by(Usuario.id_usuario).offset(offset).limit(limit).all()
        return usuarios, total

    def create(self, datos: Dict[str, Any]) -> Usuario:
        usuario = Usuario(**datos)
        self.db.add(usuario)
        self.db.flush()
        return usuario

    # ==================== CRÉDITO Y MÉTRICAS ====================

    def list_con_credito(self) -> List[Tuple[Usuario, ClienteCreditoResumen]]:
        """Clientes con saldo de crédito pendiente"""
        return self.db.query(Usuario, ClienteCreditoResumen).join(
            ClienteCreditoResumen, ClienteCreditoResumen.id_usuario == Usuario.id_usuario
        ).filter(
            ClienteCreditoResumen.saldo_total > 0,
            Usuario.estado != "eliminado"
        ).order_by(desc(ClienteCreditoResumen.saldo_total)).all()

    def get_metricas_compras(self, id_usuario: int) -> Dict[str, Any]:
        total_compras, monto_total, ultima_compra = self.db.query(
            func.count(Venta.id_venta),
            func.coalesce(func.sum(Venta.total), 0),
            func.max(Venta.fecha_venta)
        ).filter(Venta.id_usuario == id_usuario).one()

        return {
            "total_compras": total_compras or 0,
            "monto_total_compras": monto_total or 0,
            "ultima_compra": ultima_compra
        }

    def get_metricas_credito(self, id_usuario: int) -> Dict[str, Any]:
        activos, saldo, abonado = self.db.query(
            func.coalesce(func.sum(case((Credito.estado == "activo", 1), else_=0)), 0),
            func.coalesce(func.sum(Credito.saldo_pendiente), 0),
            func.coalesce(func.sum(Credito.total_abonado), 0)
        ).filter(Credito.id_usuario == id_usuario).one()

        return {
            "creditos_activos": activos or 0,
            "saldo_credito_pendiente": saldo or 0,
            "total_abonado": abonado or 0
        }

    def count_descuentos_usados(self, id_usuario: int) -> int:
        return self.db.query(func.count(HistorialDescuento.id_historial)).filter(
            HistorialDescuento.id_usuario == id_usuario
        ).scalar() or 0

    def list_ventas_usuario(self, id_usuario: int, offset: int, limit: int) -> Tuple[List[Venta], int]:
        query = self.db.query(Venta).filter(Venta.id_usuario == id_usuario)
        total = query.count()
        ventas = query.order_by(desc(Venta.fecha_venta), desc(Venta.id_venta)).offset(offset).limit(limit).all()
        return ventas, total

    def list_creditos_usuario(self, id_usuario: int) -> List[Credito]:
        return self.db.query(Credito).filter(
            Credito.id_usuario == id_usuario
        ).order_by(desc(Credito.fecha_inicio)).all()
