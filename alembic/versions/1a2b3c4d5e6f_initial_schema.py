# Plantilla de archivos de versión (migraciones)

"""initial schema

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-18 10:12:41.118203

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated=True):
    cols = [sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False))
    return cols


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('position', sa.String(length=100), nullable=True),
        sa.Column('hire_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('profile_image', sa.String(length=500), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'])
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_department'), 'users', ['department'])

    op.create_table(
        'skills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_skills')),
    )
    op.create_index(op.f('ix_skills_id'), 'skills', ['id'])
    op.create_index(op.f('ix_skills_name'), 'skills', ['name'], unique=True)

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('difficulty_level', sa.String(length=20), nullable=True),
        sa.Column('duration_hours', sa.Integer(), nullable=True),
        sa.Column('instructor_name', sa.String(length=100), nullable=True),
        sa.Column('instructor_bio', sa.Text(), nullable=True),
        sa.Column('course_image', sa.String(length=500), nullable=True),
        sa.Column('video_url', sa.String(length=500), nullable=True),
        sa.Column('course_materials', sa.JSON(), nullable=False),
        sa.Column('prerequisites', sa.Text(), nullable=True),
        sa.Column('learning_objectives', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL',
                                name=op.f('fk_courses_created_by_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_courses')),
    )
    op.create_index(op.f('ix_courses_id'), 'courses', ['id'])
    op.create_index(op.f('ix_courses_category'), 'courses', ['category'])

    op.create_table(
        'user_skills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.Column('proficiency_level', sa.Integer(), nullable=False),
        sa.Column('years_experience', sa.Integer(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_user_skills_user_id_users')),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id'], ondelete='CASCADE',
                                name=op.f('fk_user_skills_skill_id_skills')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_skills')),
        sa.UniqueConstraint('user_id', 'skill_id', name='uq_user_skill'),
    )
    op.create_index(op.f('ix_user_skills_user_id'), 'user_skills', ['user_id'])
    op.create_index(op.f('ix_user_skills_skill_id'), 'user_skills', ['skill_id'])

    op.create_table(
        'course_enrollments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('enrollment_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completion_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('progress_percentage', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('final_score', sa.Integer(), nullable=True),
        sa.Column('certificate_url', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_course_enrollments_user_id_users')),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE',
                                name=op.f('fk_course_enrollments_course_id_courses')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_course_enrollments')),
        sa.UniqueConstraint('user_id', 'course_id', name='uq_course_enrollment'),
    )
    op.create_index(op.f('ix_course_enrollments_user_id'), 'course_enrollments', ['user_id'])
    op.create_index(op.f('ix_course_enrollments_course_id'), 'course_enrollments', ['course_id'])

    op.create_table(
        'course_skills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.Column('skill_level', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE',
                                name=op.f('fk_course_skills_course_id_courses')),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id'], ondelete='CASCADE',
                                name=op.f('fk_course_skills_skill_id_skills')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_course_skills')),
        sa.UniqueConstraint('course_id', 'skill_id', name='uq_course_skill'),
    )
    op.create_index(op.f('ix_course_skills_course_id'), 'course_skills', ['course_id'])
    op.create_index(op.f('ix_course_skills_skill_id'), 'course_skills', ['skill_id'])

    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('project_type', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('priority', sa.String(length=10), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('estimated_hours', sa.Integer(), nullable=True),
        sa.Column('actual_hours', sa.Integer(), nullable=False),
        sa.Column('budget', sa.Numeric(12, 2), nullable=True),
        sa.Column('client_name', sa.String(length=100), nullable=True),
        sa.Column('project_manager_id', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_manager_id'], ['users.id'], ondelete='SET NULL',
                                name=op.f('fk_projects_project_manager_id_users')),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL',
                                name=op.f('fk_projects_created_by_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_projects')),
    )
    op.create_index(op.f('ix_projects_id'), 'projects', ['id'])

    op.create_table(
        'project_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('assignment_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('hours_allocated', sa.Integer(), nullable=False),
        sa.Column('hours_worked', sa.Integer(), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(8, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('performance_rating', sa.Integer(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_project_assignments_user_id_users')),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE',
                                name=op.f('fk_project_assignments_project_id_projects')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_project_assignments')),
        sa.UniqueConstraint('user_id', 'project_id', name='uq_project_assignment'),
    )
    op.create_index(op.f('ix_project_assignments_user_id'), 'project_assignments', ['user_id'])
    op.create_index(op.f('ix_project_assignments_project_id'), 'project_assignments', ['project_id'])

    op.create_table(
        'project_skills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.Column('required_level', sa.Integer(), nullable=False),
        sa.Column('is_mandatory', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE',
                                name=op.f('fk_project_skills_project_id_projects')),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id'], ondelete='CASCADE',
                                name=op.f('fk_project_skills_skill_id_skills')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_project_skills')),
        sa.UniqueConstraint('project_id', 'skill_id', name='uq_project_skill'),
    )
    op.create_index(op.f('ix_project_skills_project_id'), 'project_skills', ['project_id'])
    op.create_index(op.f('ix_project_skills_skill_id'), 'project_skills', ['skill_id'])

    op.create_table(
        'badges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('badge_type', sa.String(length=50), nullable=True),
        sa.Column('criteria', sa.Text(), nullable=True),
        sa.Column('badge_image', sa.String(length=500), nullable=True),
        sa.Column('token_reward', sa.Integer(), nullable=False),
        sa.Column('rarity', sa.String(length=20), nullable=True),
        sa.Column('course_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='SET NULL',
                                name=op.f('fk_badges_course_id_courses')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_badges')),
    )
    op.create_index(op.f('ix_badges_id'), 'badges', ['id'])

    op.create_table(
        'user_badges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('badge_id', sa.Integer(), nullable=False),
        sa.Column('earned_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('awarded_by', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_user_badges_user_id_users')),
        sa.ForeignKeyConstraint(['badge_id'], ['badges.id'], ondelete='CASCADE',
                                name=op.f('fk_user_badges_badge_id_badges')),
        sa.ForeignKeyConstraint(['awarded_by'], ['users.id'], ondelete='SET NULL',
                                name=op.f('fk_user_badges_awarded_by_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_badges')),
        sa.UniqueConstraint('user_id', 'badge_id', name='uq_user_badge'),
    )
    op.create_index(op.f('ix_user_badges_user_id'), 'user_badges', ['user_id'])
    op.create_index(op.f('ix_user_badges_badge_id'), 'user_badges', ['badge_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('action_url', sa.String(length=500), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_notifications_user_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_notifications')),
    )
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('stripe_payment_intent_id', sa.String(length=255), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_type', sa.String(length=50), nullable=True),
        sa.Column('item_id', sa.Integer(), nullable=True),
        sa.Column('item_type', sa.String(length=50), nullable=True),
        sa.Column('stripe_customer_id', sa.String(length=255), nullable=True),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_payments_user_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_payments')),
        sa.UniqueConstraint('stripe_payment_intent_id', name=op.f('uq_payments_stripe_payment_intent_id')),
    )
    op.create_index(op.f('ix_payments_user_id'), 'payments', ['user_id'])

    op.create_table(
        'performance_reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('reviewer_id', sa.Integer(), nullable=True),
        sa.Column('review_period_start', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_period_end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('overall_rating', sa.Integer(), nullable=True),
        sa.Column('technical_skills_rating', sa.Integer(), nullable=True),
        sa.Column('communication_rating', sa.Integer(), nullable=True),
        sa.Column('teamwork_rating', sa.Integer(), nullable=True),
        sa.Column('leadership_rating', sa.Integer(), nullable=True),
        sa.Column('achievements', sa.Text(), nullable=True),
        sa.Column('areas_for_improvement', sa.Text(), nullable=True),
        sa.Column('goals_next_period', sa.Text(), nullable=True),
        sa.Column('reviewer_comments', sa.Text(), nullable=True),
        sa.Column('employee_comments', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['employee_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_performance_reviews_employee_id_users')),
        sa.ForeignKeyConstraint(['reviewer_id'], ['users.id'], ondelete='SET NULL',
                                name=op.f('fk_performance_reviews_reviewer_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_performance_reviews')),
    )
    op.create_index(op.f('ix_performance_reviews_employee_id'), 'performance_reviews', ['employee_id'])

    op.create_table(
        'user_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('balance', sa.Integer(), nullable=False),
        sa.Column('lifetime_earned', sa.Integer(), nullable=False),
        sa.Column('lifetime_spent', sa.Integer(), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_user_tokens_user_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_tokens')),
        sa.UniqueConstraint('user_id', name=op.f('uq_user_tokens_user_id')),
    )

    op.create_table(
        'token_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('transaction_type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(length=50), nullable=True),
        sa.Column('source_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('balance_after', sa.Integer(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_token_transactions_user_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_token_transactions')),
    )
    op.create_index(op.f('ix_token_transactions_user_id'), 'token_transactions', ['user_id'])

    op.create_table(
        'app_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('setting_key', sa.String(length=100), nullable=False),
        sa.Column('setting_value', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_app_settings')),
    )
    op.create_index(op.f('ix_app_settings_setting_key'), 'app_settings', ['setting_key'], unique=True)

    op.create_table(
        'leaderboard_points',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('points_type', sa.String(length=50), nullable=False),
        sa.Column('points_earned', sa.Integer(), nullable=False),
        sa.Column('source_id', sa.Integer(), nullable=True),
        sa.Column('source_type', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_leaderboard_points_user_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_leaderboard_points')),
    )
    op.create_index(op.f('ix_leaderboard_points_user_id'), 'leaderboard_points', ['user_id'])
    op.create_index(op.f('ix_leaderboard_points_created_at'), 'leaderboard_points', ['created_at'])

    op.create_table(
        'leaderboard_seasons',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('prize_description', sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_leaderboard_seasons')),
    )

    op.create_table(
        'leaderboard_achievements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('achievement_type', sa.String(length=50), nullable=True),
        sa.Column('criteria_value', sa.Integer(), nullable=True),
        sa.Column('badge_image', sa.String(length=500), nullable=True),
        sa.Column('points_reward', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_leaderboard_achievements')),
    )

    op.create_table(
        'user_achievements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('achievement_id', sa.Integer(), nullable=False),
        sa.Column('unlocked_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_user_achievements_user_id_users')),
        sa.ForeignKeyConstraint(['achievement_id'], ['leaderboard_achievements.id'], ondelete='CASCADE',
                                name=op.f('fk_user_achievements_achievement_id_leaderboard_achievements')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_achievements')),
        sa.UniqueConstraint('user_id', 'achievement_id', name='uq_user_achievement'),
    )
    op.create_index(op.f('ix_user_achievements_user_id'), 'user_achievements', ['user_id'])
    op.create_index(op.f('ix_user_achievements_achievement_id'), 'user_achievements', ['achievement_id'])

    op.create_table(
        'user_leaderboard_stats',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False),
        sa.Column('monthly_points', sa.Integer(), nullable=False),
        sa.Column('quarterly_points', sa.Integer(), nullable=False),
        sa.Column('courses_completed', sa.Integer(), nullable=False),
        sa.Column('projects_completed', sa.Integer(), nullable=False),
        sa.Column('badges_earned', sa.Integer(), nullable=False),
        sa.Column('current_streak', sa.Integer(), nullable=False),
        sa.Column('longest_streak', sa.Integer(), nullable=False),
        sa.Column('last_activity_date', sa.Date(), nullable=True),
        sa.Column('current_month', sa.Integer(), nullable=True),
        sa.Column('current_quarter', sa.Integer(), nullable=True),
        sa.Column('current_year', sa.Integer(), nullable=True),
        sa.Column('ranking_position', sa.Integer(), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name=op.f('fk_user_leaderboard_stats_user_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_leaderboard_stats')),
        sa.UniqueConstraint('user_id', name=op.f('uq_user_leaderboard_stats_user_id')),
    )

    op.create_table(
        'password_reset_codes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('consumed', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_password_reset_codes')),
    )
    op.create_index(op.f('ix_password_reset_codes_id'), 'password_reset_codes', ['id'])
    op.create_index(op.f('ix_password_reset_codes_email'), 'password_reset_codes', ['email'])
    op.create_index('ix_reset_email_active', 'password_reset_codes', ['email', 'consumed'])


def downgrade():
    for table in (
        'password_reset_codes', 'user_leaderboard_stats', 'user_achievements',
        'leaderboard_achievements', 'leaderboard_seasons', 'leaderboard_points',
        'app_settings', 'token_transactions', 'user_tokens', 'performance_reviews',
        'payments', 'notifications', 'user_badges', 'badges', 'project_skills',
        'project_assignments', 'projects', 'course_skills', 'course_enrollments',
        'user_skills', 'courses', 'skills', 'users',
    ):
        op.drop_table(table)
