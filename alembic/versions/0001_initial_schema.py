"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

import chipization.db.models


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create accounts, animal types, location points, animals and visits."""
    op.create_table('accounts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_salt', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=128), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', chipization.db.models.UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    op.create_table('animal_types',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table('location_points',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('latitude', 'longitude', name='uq_location_point_coordinates')
    )

    op.create_table('animals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('weight', sa.Float(), nullable=False),
        sa.Column('height', sa.Float(), nullable=False),
        sa.Column('length', sa.Float(), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=False),
        sa.Column('life_status', sa.String(length=10), nullable=False),
        sa.Column('chipping_date_time', chipization.db.models.UTCDateTime(), nullable=False),
        sa.Column('chipper_id', sa.Integer(), nullable=False),
        sa.Column('chipping_location_id', sa.Integer(), nullable=False),
        sa.Column('death_date_time', chipization.db.models.UTCDateTime(), nullable=True),
        sa.Column('updated_at', chipization.db.models.UTCDateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['chipper_id'], ['accounts.id'], ),
        sa.ForeignKeyConstraint(['chipping_location_id'], ['location_points.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_animal_chipper', 'animals', ['chipper_id'], unique=False)
    op.create_index('ix_animal_chipping_location', 'animals', ['chipping_location_id'], unique=False)

    op.create_table('animal_type_links',
        sa.Column('animal_id', sa.Integer(), nullable=False),
        sa.Column('animal_type_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['animal_id'], ['animals.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['animal_type_id'], ['animal_types.id'], ),
        sa.PrimaryKeyConstraint('animal_id', 'animal_type_id')
    )
    op.create_index('ix_animal_type_links_type', 'animal_type_links', ['animal_type_id'], unique=False)

    op.create_table('animal_visited_locations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('animal_id', sa.Integer(), nullable=False),
        sa.Column('location_point_id', sa.Integer(), nullable=False),
        sa.Column('visited_at', chipization.db.models.UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(['animal_id'], ['animals.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['location_point_id'], ['location_points.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_visit_animal_time', 'animal_visited_locations', ['animal_id', 'visited_at', 'id'], unique=False)
    op.create_index('ix_visit_location_point', 'animal_visited_locations', ['location_point_id'], unique=False)


def downgrade() -> None:
    """Drop the whole schema."""
    op.drop_index('ix_visit_location_point', table_name='animal_visited_locations')
    op.drop_index('ix_visit_animal_time', table_name='animal_visited_locations')
    op.drop_table('animal_visited_locations')
    op.drop_index('ix_animal_type_links_type', table_name='animal_type_links')
    op.drop_table('animal_type_links')
    op.drop_index('ix_animal_chipping_location', table_name='animals')
    op.drop_index('ix_animal_chipper', table_name='animals')
    op.drop_table('animals')
    op.drop_table('location_points')
    op.drop_table('animal_types')
    op.drop_table('accounts')
