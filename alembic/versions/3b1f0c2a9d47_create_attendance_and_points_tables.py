from alembic import op
import sqlalchemy as sa

revision = '3b1f0c2a9d47'
down_revision = None
branch_labels = None
depends_on = None

event_type_enum = sa.Enum('MEETING', 'TRAINING', name='eventtype')
attendance_status_enum = sa.Enum('present', 'late', 'absent', 'medical', 'proxy', name='attendancestatus')
training_status_enum = sa.Enum('upcoming', 'completed', 'cancelled', name='trainingstatus')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'chapters',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('chapter_id', sa.Integer(), sa.ForeignKey('chapters.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_members_chapter_id', 'members', ['chapter_id'])

    op.create_table(
        'meetings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('topic', sa.Text(), nullable=False),
        sa.Column('chapter_ids', sa.JSON(), nullable=False),
        sa.Column('start_date_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('late_punch_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_meetings_late_punch_time', 'meetings', ['late_punch_time'])

    op.create_table(
        'trainings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('chapter_ids', sa.JSON(), nullable=False),
        sa.Column('training_date_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', training_status_enum, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_trainings_training_date_time', 'trainings', ['training_date_time'])

    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('event_type', event_type_enum, nullable=False),
        sa.Column('status', attendance_status_enum, nullable=False),
        sa.Column('user_location', sa.JSON(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('member_id', 'event_id', 'event_type', name='uq_attendance_member_event'),
    )
    op.create_index('ix_attendance_records_member_id', 'attendance_records', ['member_id'])
    op.create_index('ix_attendance_event', 'attendance_records', ['event_id', 'event_type'])

    op.create_table(
        'points',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('key', sa.String(length=50), nullable=False, unique=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('value', sa.Integer(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'user_points',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('point_key', sa.String(length=50), nullable=False),
        sa.Column('total', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('member_id', 'point_key', name='uq_user_points_member_key'),
    )
    op.create_index('ix_user_points_member_id', 'user_points', ['member_id'])
    op.create_table(
        'user_point_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('point_key', sa.String(length=50), nullable=False),
        sa.Column('change', sa.Integer(), nullable=False),
        sa.Column('source_type', sa.String(length=50), nullable=False),
        sa.Column('source_id', sa.Integer(), nullable=True),
        sa.Column('remarks', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('member_id', 'point_key', 'source_type', 'source_id', name='uq_point_history_source'),
    )
    op.create_index('ix_user_point_history_member_id', 'user_point_history', ['member_id'])


def downgrade():
    op.drop_table('user_point_history')
    op.drop_table('user_points')
    op.drop_table('points')
    op.drop_table('attendance_records')
    op.drop_table('trainings')
    op.drop_table('meetings')
    op.drop_table('members')
    op.drop_table('chapters')
    bind = op.get_bind()
    attendance_status_enum.drop(bind, checkfirst=True)
    event_type_enum.drop(bind, checkfirst=True)
    training_status_enum.drop(bind, checkfirst=True)
