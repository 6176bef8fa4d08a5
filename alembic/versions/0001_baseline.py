"""Baseline: tenant hierarchy, users, role permissions, trips.

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-17

Creates:
- corporate_clients, programs, locations
- users
- role_permissions (unique grant index with NULL scope ids compared equal)
- trips, trip_status_logs
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_baseline'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ==========================================================================
    # Tenant hierarchy
    # ==========================================================================
    op.create_table(
        'corporate_clients',
        sa.Column('id', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'programs',
        sa.Column('id', sa.String(50), nullable=False),
        sa.Column('corporate_client_id', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['corporate_client_id'], ['corporate_clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_programs_corporate_client', 'programs', ['corporate_client_id'])

    op.create_table(
        'locations',
        sa.Column('id', sa.String(50), nullable=False),
        sa.Column('program_id', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['program_id'], ['programs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_locations_program', 'locations', ['program_id'])

    # ==========================================================================
    # users
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('user_id', sa.String(50), nullable=False),
        sa.Column('user_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False),
        sa.Column('corporate_client_id', sa.String(50), nullable=True),
        sa.Column('primary_program_id', sa.String(50), nullable=True),
        sa.Column('authorized_programs', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['corporate_client_id'], ['corporate_clients.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['primary_program_id'], ['programs.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('user_id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('idx_users_corporate_client', 'users', ['corporate_client_id'])

    # ==========================================================================
    # role_permissions
    # ==========================================================================
    op.create_table(
        'role_permissions',
        sa.Column('id', sa.String(50), nullable=False),
        sa.Column('role', sa.String(50), nullable=False),
        sa.Column('permission', sa.String(100), nullable=False),
        sa.Column('resource', sa.String(50), server_default='*', nullable=False),
        sa.Column('program_id', sa.String(50), nullable=True),
        sa.Column('corporate_client_id', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_role_permissions_role', 'role_permissions', ['role'])
    op.create_index('idx_role_permissions_program', 'role_permissions', ['program_id'])
    op.create_index('idx_role_permissions_corporate_client', 'role_permissions', ['corporate_client_id'])
    op.create_index(
        'uq_role_permissions_grant',
        'role_permissions',
        [
            'role',
            'permission',
            'resource',
            sa.text("coalesce(program_id, '')"),
            sa.text("coalesce(corporate_client_id, '')"),
        ],
        unique=True,
    )

    # ==========================================================================
    # trips
    # ==========================================================================
    op.create_table(
        'trips',
        sa.Column('id', sa.String(50), nullable=False),
        sa.Column('program_id', sa.String(50), nullable=False),
        sa.Column('location_id', sa.String(50), nullable=True),
        sa.Column('driver_id', sa.String(50), nullable=True),
        sa.Column('trip_type', sa.String(20), server_default='one_way', nullable=False),
        sa.Column('pickup_address', sa.Text(), nullable=False),
        sa.Column('dropoff_address', sa.Text(), nullable=False),
        sa.Column('scheduled_pickup_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('scheduled_return_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_pickup_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_dropoff_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_return_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(20), server_default='scheduled', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(50), nullable=True),
        sa.Column('updated_by', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['program_id'], ['programs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['driver_id'], ['users.user_id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['created_by'], ['users.user_id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['updated_by'], ['users.user_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_trips_program_status', 'trips', ['program_id', 'status'])
    op.create_index('idx_trips_driver', 'trips', ['driver_id'])

    op.create_table(
        'trip_status_logs',
        sa.Column('id', sa.String(50), nullable=False),
        sa.Column('trip_id', sa.String(50), nullable=False),
        sa.Column('old_status', sa.String(20), nullable=True),
        sa.Column('new_status', sa.String(20), nullable=False),
        sa.Column('changed_by', sa.String(50), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['trip_id'], ['trips.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['changed_by'], ['users.user_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_trip_status_logs_trip', 'trip_status_logs', ['trip_id', 'created_at'])


def downgrade() -> None:
    op.drop_table('trip_status_logs')
    op.drop_table('trips')
    op.drop_table('role_permissions')
    op.drop_table('users')
    op.drop_table('locations')
    op.drop_table('programs')
    op.drop_table('corporate_clients')
