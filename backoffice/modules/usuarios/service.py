import logging
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from backoffice.core.auth.dependencies import ROLES_PERSONAL
from backoffice.core.exceptions import ErrorConflicto, ErrorNoEncontrado, ErrorProhibido, ErrorValidacion
from backoffice.core.security import hash_password
from backoffice.shared.database.models import Usuario
from backoffice.modules.ventas.schemas import VentaResumenResponse
from backoffice.modules.creditos.schemas import CreditoResponse
from .repository import UsuariosRepository
from .schemas import (
    UsuarioCreate, UsuarioUpdate, UsuarioResponse, EstadoUsuario,
    UsuarioConCreditoResponse, MetricasUsuarioResponse
)

logger = logging.getLogger(__name__)

ROL_POR_DEFECTO = "Cliente"

class UsuariosService:
    """
    Gestión de usuarios (personal y clientes) y datos agregados por cliente
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = UsuariosRepository(db)

    def _get_or_404(self, id_usuario: int) -> Usuario:
        usuario = self.repository.get_by_id(id_usuario)
        if not usuario or usuario.estado == "eliminado":
            raise ErrorNoEncontrado("Usuario no encontrado")
        return usuario

    def _verificar_acceso(self, id_usuario: int, actual: Usuario):
        if actual.nombre_rol not in ROLES_PERSONAL and actual.id_usuario != id_usuario:
            raise ErrorProhibido("No tiene acceso a la información de otro usuario")

    def _validar_unicidad(self, usuario: Optional[str], correo: Optional[str], excluir_id: Optional[int] = None):
        if usuario:
            existente = self.repository.get_by_usuario(usuario)
            if existente and existente.id_usuario != excluir_id:
                raise ErrorConflicto("El nombre de usuario ya está en uso")
        if correo:
            existente = self.repository.get_by_correo(correo)
            if existente and existente.id_usuario != excluir_id:
                raise ErrorConflicto("El correo electrónico ya está registrado")

    # ==================== CRUD ====================

    def registrar(self, datos: UsuarioCreate, nombre_rol: Optional[str] = None) -> Usuario:
        """
        Crear el usuario con la contraseña hasheada. El rol se toma de
        `id_rol`, de `nombre_rol` o, por defecto, Cliente.
        """
        self._validar_unicidad(datos.usuario, datos.correo_electronico)

        if datos.id_rol is not None:
            rol = self.repository.get_rol_by_id(datos.id_rol)
        else:
            rol = self.repository.get_rol_by_nombre(nombre_rol or ROL_POR_DEFECTO)
        if not rol:
            raise ErrorValidacion("Rol no válido")

        valores = datos.model_dump(exclude={"contrasena", "id_rol", "estado"})
        usuario = self.repository.create({
            **valores,
            "contrasena": hash_password(datos.contrasena),
            "id_rol": rol.id_rol,
            "estado": datos.estado.value
        })
        self.db.commit()
        logger.info(f"Usuario {usuario.usuario} creado con rol {rol.nombre_rol}")
        return self.repository.get_by_id(usuario.id_usuario)

    async def crear(self, datos: UsuarioCreate) -> UsuarioResponse:
        return UsuarioResponse.model_validate(self.registrar(datos))

    async def listar(
        self,
        nombre: Optional[str],
        correo: Optional[str],
        rol: Optional[str],
        estado: Optional[str],
        offset: int,
        limit: int
    ) -> Tuple[List[UsuarioResponse], int]:
        usuarios, total = self.repository.list_usuarios(nombre, correo, rol, estado, offset, limit)
        return [UsuarioResponse.model_validate(u) for u in usuarios], total

    async def obtener(self, id_usuario: int, actual: Usuario) -> UsuarioResponse:
        self._verificar_acceso(id_usuario, actual)
        return UsuarioResponse.model_validate(self._get_or_404(id_usuario))

    async def actualizar(self, id_usuario: int, datos: UsuarioUpdate) -> UsuarioResponse:
        usuario = self._get_or_404(id_usuario)
        cambios = datos.model_dump(exclude_unset=True)

        self._validar_unicidad(cambios.get("usuario"), cambios.get("correo_electronico"), excluir_id=id_usuario)

        if "id_rol" in cambios and not self.repository.get_rol_by_id(cambios["id_rol"]):
            raise ErrorValidacion("Rol no válido")
        if cambios.get("contrasena"):
            cambios["contrasena"] = hash_password(cambios["contrasena"])
        if cambios.get("estado"):
            cambios["estado"] = cambios["estado"].value

        for campo, valor in cambios.items():
            setattr(usuario, campo, valor)
        self.db.commit()
        return UsuarioResponse.model_validate(self.repository.get_by_id(id_usuario))

    async def cambiar_estado(self, id_usuario: int, estado: EstadoUsuario, actual: Usuario) -> UsuarioResponse:
        usuario = self._get_or_404(id_usuario)
        if usuario.id_usuario == actual.id_usuario and estado != EstadoUsuario.activo:
            raise ErrorValidacion("No puede desactivar su propio usuario")
        usuario.estado = estado.value
        self.db.commit()
        return UsuarioResponse.model_validate(self.repository.get_by_id(id_usuario))

    async def eliminar(self, id_usuario: int, actual: Usuario) -> None:
        """Eliminación lógica: conserva ventas y créditos del usuario"""
        usuario = self._get_or_404(id_usuario)
        if usuario.id_usuario == actual.id_usuario:
            raise ErrorValidacion("No puede eliminar su propio usuario")
        usuario.estado = "eliminado"
        self.db.commit()

    # ==================== CLIENTES ====================

    async def con_credito(self) -> List[UsuarioConCreditoResponse]:
        return [
            UsuarioConCreditoResponse(
                id_usuario=usuario.id_usuario,
                nombre_completo=usuario.nombre_completo,
                correo_electronico=usuario.correo_electronico,
                telefono=usuario.telefono,
                credito_total=resumen.credito_total,
                saldo_total=resumen.saldo_total,
                cantidad_creditos_activos=resumen.cantidad_creditos_activos
            )
            for usuario, resumen in self.repository.list_con_credito()
        ]

    async def metricas(self, id_usuario: int, actual: Usuario) -> MetricasUsuarioResponse:
        self._verificar_acceso(id_usuario, actual)
        self._get_or_404(id_usuario)

        compras = self.repository.get_metricas_compras(id_usuario)
        credito = self.repository.get_metricas_credito(id_usuario)
        total_compras = compras["total_compras"]
        monto = Decimal(str(compras["monto_total_compras"]))

        return MetricasUsuarioResponse(
            id_usuario=id_usuario,
            total_compras=total_compras,
            monto_total_compras=monto,
            ticket_promedio=(monto / total_compras).quantize(Decimal("0.01")) if total_compras else Decimal("0"),
            ultima_compra=compras["ultima_compra"],
            creditos_activos=credito["creditos_activos"],
            saldo_credito_pendiente=credito["saldo_credito_pendiente"],
            total_abonado=credito["total_abonado"],
            descuentos_usados=self.repository.count_descuentos_usados(id_usuario)
        )

    async def ventas(self, id_usuario: int, actual: Usuario, offset: int, limit: int) -> Tuple[list, int]:
        self._verificar_acceso(id_usuario, actual)
        self._get_or_404(id_usuario)
        ventas, total = self.repository.list_ventas_usuario(id_usuario, offset, limit)
        return [VentaResumenResponse.model_validate(v) for v in ventas], total

    async def creditos(self, id_usuario: int, actual: Usuario) -> List[CreditoResponse]:
        self._verificar_acceso(id_usuario, actual)
        self._get_or_404(id_usuario)
        return [CreditoResponse.model_validate(c) for c in self.repository.list_creditos_usuario(id_usuario)]
