"""create locations and cases tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "locations",
        sa.Column("code", sa.String(length=4), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("code", name="pk_locations"),
    )
    op.create_table(
        "cases",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("aviso", sa.String(length=32), nullable=False),
        sa.Column("texto_breve", sa.Text(), nullable=True),
        sa.Column("tipologia", sa.String(length=120), nullable=True),
        sa.Column("prioridad", sa.String(length=60), nullable=True),
        sa.Column("zona", sa.String(length=60), nullable=True),
        sa.Column("ubicacion", sa.String(length=32), nullable=True),
        sa.Column("denominacion_ubicacion_tecnica", sa.String(length=255), nullable=True),
        sa.Column("fecha_creacion", sa.Date(), nullable=False),
        sa.Column("fin_averia_tiempo_respuesta", sa.Date(), nullable=True),
        sa.Column("estado", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_cases"),
        sa.UniqueConstraint("aviso", name="uq_cases_aviso"),
        sa.ForeignKeyConstraint(
            ["ubicacion"],
            ["locations.code"],
            name="fk_cases_ubicacion_locations",
        ),
    )
    op.create_index("ix_cases_zona", "cases", ["zona"], unique=False)
    op.create_index("ix_cases_estado", "cases", ["estado"], unique=False)
    op.create_index("ix_cases_fecha_creacion", "cases", ["fecha_creacion"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_cases_fecha_creacion", table_name="cases")
    op.drop_index("ix_cases_estado", table_name="cases")
    op.drop_index("ix_cases_zona", table_name="cases")
    op.drop_table("cases")
    op.drop_table("locations")
