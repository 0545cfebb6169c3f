"""Modelos SQLAlchemy para los catálogos de ubicación (SEPOMEX/INEGI)."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from localidades.core.database import Base


class CatEstado(Base):
    __tablename__ = "cat_estados"

    # Coincide con la clave política del estado; no es autoincremental
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    estado: Mapped[str] = mapped_column(String(50), nullable=False)


class CatMunicipio(Base):
    __tablename__ = "cat_municipios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    municipio: Mapped[str] = mapped_column(String(50), nullable=False)
    id_estado: Mapped[int] = mapped_column(
        Integer, ForeignKey("cat_estados.id", name="fk_municipios_id_estado"), nullable=False
    )


class CatCodigoPostal(Base):
    __tablename__ = "cat_codigos_postales"

    # El código postal es su propio identificador
    codigo_postal: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    id_municipio: Mapped[int] = mapped_column(
        Integer, ForeignKey("cat_municipios.id", name="fk_codigos_postales_id_municipio"), nullable=False
    )
    id_estado: Mapped[int] = mapped_column(
        Integer, ForeignKey("cat_estados.id", name="fk_codigos_postales_id_estado"), nullable=False
    )


class CatLocalidad(Base):
    __tablename__ = "cat_localidades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    localidad: Mapped[str] = mapped_column(String(100), nullable=False)
    codigo_postal: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cat_codigos_postales.codigo_postal", name="fk_localidades_codigo_postal"),
        nullable=False,
        index=True,
    )
    id_municipio: Mapped[int] = mapped_column(
        Integer, ForeignKey("cat_municipios.id", name="fk_localidades_id_municipio"), nullable=False
    )
    id_estado: Mapped[int] = mapped_column(
        Integer, ForeignKey("cat_estados.id", name="fk_localidades_id_estado"), nullable=False
    )
