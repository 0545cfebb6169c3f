"""Crear catálogos de ubicación

Revision ID: 001
Revises:
Create Date: 2025-07-17 19:35:32.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'cat_estados',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=False),
        sa.Column('estado', sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'cat_municipios',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=False),
        sa.Column('municipio', sa.String(50), nullable=False),
        sa.Column('id_estado', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['id_estado'], ['cat_estados.id'], name='fk_municipios_id_estado'),
    )

    # El código postal es su propia llave primaria
    op.create_table(
        'cat_codigos_postales',
        sa.Column('codigo_postal', sa.Integer(), nullable=False, autoincrement=False),
        sa.Column('id_municipio', sa.Integer(), nullable=False),
        sa.Column('id_estado', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('codigo_postal'),
        sa.ForeignKeyConstraint(['id_municipio'], ['cat_municipios.id'], name='fk_codigos_postales_id_municipio'),
        sa.ForeignKeyConstraint(['id_estado'], ['cat_estados.id'], name='fk_codigos_postales_id_estado'),
    )

    op.create_table(
        'cat_localidades',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=False),
        sa.Column('localidad', sa.String(100), nullable=False),
        sa.Column('codigo_postal', sa.Integer(), nullable=False),
        sa.Column('id_municipio', sa.Integer(), nullable=False),
        sa.Column('id_estado', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['codigo_postal'], ['cat_codigos_postales.codigo_postal'], name='fk_localidades_codigo_postal'
        ),
        sa.ForeignKeyConstraint(['id_municipio'], ['cat_municipios.id'], name='fk_localidades_id_municipio'),
        sa.ForeignKeyConstraint(['id_estado'], ['cat_estados.id'], name='fk_localidades_id_estado'),
    )

    # Búsqueda por CP
    op.create_index('ix_cat_localidades_codigo_postal', 'cat_localidades', ['codigo_postal'])


def downgrade() -> None:
    op.drop_index('ix_cat_localidades_codigo_postal', table_name='cat_localidades')
    op.drop_table('cat_localidades')
    op.drop_table('cat_codigos_postales')
    op.drop_table('cat_municipios')
    op.drop_table('cat_estados')
