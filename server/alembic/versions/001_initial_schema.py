"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ('SUPER_ADMIN', 'ADMIN', 'MANAGER', 'SUPERVISOR', 'EMPLOYEE')
SHIFT_STATUSES = ('SCHEDULED', 'CONFIRMED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')
DAY_OFF_TYPES = ('DAY_OFF', 'VACATION', 'SICK', 'PERSONAL', 'HOLIDAY', 'UNPAID_LEAVE', 'OTHER')
TIMESHEET_STATUSES = ('PENDING', 'SUBMITTED', 'APPROVED', 'REJECTED')
TIMESHEET_SOURCES = ('web', 'kiosk')
TIME_OFF_TYPES = ('VACATION', 'SICK', 'PERSONAL', 'UNPAID', 'OTHER')
TIME_OFF_STATUSES = ('PENDING', 'APPROVED', 'REJECTED', 'CANCELLED')


def upgrade() -> None:
    op.create_table(
        'companies',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('timezone', sa.String(64), nullable=False, server_default='UTC'),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'locations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('company_id', sa.Uuid(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('timezone', sa.String(64), nullable=True),
        sa.Column('is_headquarters', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('kiosk_token', sa.String(64), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_locations_company_id', 'locations', ['company_id'])
    op.create_index('idx_locations_company_active', 'locations', ['company_id', 'is_active'])

    op.create_table(
        'positions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('company_id', sa.Uuid(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=True),
        sa.Column('color', sa.String(7), nullable=False, server_default='#3B82F6'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_positions_company_id', 'positions', ['company_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('company_id', sa.Uuid(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('role', sa.Enum(*USER_ROLES, name='userrole'), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('can_view_all', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('pin_hash', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('company_id', 'email', name='uq_user_company_email'),
    )
    op.create_index('ix_users_company_id', 'users', ['company_id'])
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('idx_users_company_active', 'users', ['company_id', 'is_active'])

    op.create_table(
        'user_locations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', sa.Uuid(), sa.ForeignKey('locations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint('user_id', 'location_id', name='uq_user_location'),
    )
    op.create_index('ix_user_locations_user_id', 'user_locations', ['user_id'])
    op.create_index('ix_user_locations_location_id', 'user_locations', ['location_id'])

    op.create_table(
        'user_positions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position_id', sa.Uuid(), sa.ForeignKey('positions.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('user_id', 'position_id', name='uq_user_position'),
    )
    op.create_index('ix_user_positions_user_id', 'user_positions', ['user_id'])
    op.create_index('ix_user_positions_position_id', 'user_positions', ['position_id'])

    op.create_table(
        'shifts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('location_id', sa.Uuid(), sa.ForeignKey('locations.id'), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('position_id', sa.Uuid(), sa.ForeignKey('positions.id'), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.Column('break_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.Enum(*SHIFT_STATUSES, name='shiftstatus'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_open_shift', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_day_off', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('day_off_type', sa.Enum(*DAY_OFF_TYPES, name='dayofftype'), nullable=True),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "NOT is_day_off OR (position_id IS NULL AND start_time IS NULL AND end_time IS NULL "
            "AND break_minutes = 0 AND NOT is_open_shift)",
            name='ck_shifts_day_off_fields',
        ),
        sa.CheckConstraint('NOT is_open_shift OR user_id IS NULL', name='ck_shifts_open_shift_unassigned'),
    )
    op.create_index('ix_shifts_location_id', 'shifts', ['location_id'])
    op.create_index('ix_shifts_user_id', 'shifts', ['user_id'])
    op.create_index('ix_shifts_position_id', 'shifts', ['position_id'])
    op.create_index('ix_shifts_date', 'shifts', ['date'])
    op.create_index('idx_shifts_location_date', 'shifts', ['location_id', 'date'])
    op.create_index('idx_shifts_user_date', 'shifts', ['user_id', 'date'])
    op.create_index('idx_shifts_location_date_published', 'shifts', ['location_id', 'date', 'is_published'])

    op.create_table(
        'timesheets',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('location_id', sa.Uuid(), sa.ForeignKey('locations.id'), nullable=False),
        sa.Column('shift_id', sa.Uuid(), sa.ForeignKey('shifts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('clock_in', sa.DateTime(), nullable=False),
        sa.Column('clock_out', sa.DateTime(), nullable=True),
        sa.Column('break_start', sa.DateTime(), nullable=True),
        sa.Column('break_end', sa.DateTime(), nullable=True),
        sa.Column('break_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_minutes', sa.Integer(), nullable=True),
        sa.Column('status', sa.Enum(*TIMESHEET_STATUSES, name='timesheetstatus'), nullable=False),
        sa.Column('source', sa.Enum(*TIMESHEET_SOURCES, name='timesheetsource'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('approved_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('session_key', sa.String(200), nullable=True, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_timesheets_user_id', 'timesheets', ['user_id'])
    op.create_index('ix_timesheets_location_id', 'timesheets', ['location_id'])
    op.create_index('ix_timesheets_shift_id', 'timesheets', ['shift_id'])
    op.create_index('ix_timesheets_date', 'timesheets', ['date'])
    op.create_index('idx_timesheets_user_clock_out', 'timesheets', ['user_id', 'clock_out'])
    op.create_index('idx_timesheets_location_date', 'timesheets', ['location_id', 'date'])
    op.create_index('idx_timesheets_user_location_date', 'timesheets', ['user_id', 'location_id', 'date'])

    op.create_table(
        'time_off_requests',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', sa.Enum(*TIME_OFF_TYPES, name='timeofftype'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(1000), nullable=True),
        sa.Column('status', sa.Enum(*TIME_OFF_STATUSES, name='timeoffstatus'), nullable=False),
        sa.Column('approved_by_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejected_reason', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_time_off_requests_user_id', 'time_off_requests', ['user_id'])
    op.create_index('idx_time_off_requests_user_status', 'time_off_requests', ['user_id', 'status'])
    op.create_index('idx_time_off_requests_status_created', 'time_off_requests', ['status', 'created_at'])


def downgrade() -> None:
    op.drop_table('time_off_requests')
    op.drop_table('timesheets')
    op.drop_table('shifts')
    op.drop_table('user_positions')
    op.drop_table('user_locations')
    op.drop_table('users')
    op.drop_table('positions')
    op.drop_table('locations')
    op.drop_table('companies')

    for enum_name in (
        'timeoffstatus', 'timeofftype', 'timesheetsource', 'timesheetstatus',
        'dayofftype', 'shiftstatus', 'userrole',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
