"""
Alembic migration creating the otp_codes, profiles and housing_applications tables
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261017'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'otp_codes',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('email', sa.String, nullable=False),
        sa.Column('full_name', sa.String(100), nullable=False),
        sa.Column('code', sa.String(6), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('expires_at', sa.DateTime, nullable=False),
        sa.Column('used', sa.Boolean, nullable=False, server_default=sa.text('false')),
    )
    op.create_index('ix_otp_codes_email', 'otp_codes', ['email'])
    op.create_index('idx_otp_codes_email_used_created', 'otp_codes', ['email', 'used', 'created_at'])

    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('public_id', sa.String(10), nullable=False),
        sa.Column('email', sa.String, nullable=False),
        sa.Column('full_name', sa.String(100), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('password_hash', sa.String, nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='USER'),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_profiles_id', 'profiles', ['id'])
    op.create_index('ix_profiles_public_id', 'profiles', ['public_id'], unique=True)
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    op.create_table(
        'housing_applications',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('profile_id', sa.Integer, sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('full_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String, nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('governorate', sa.String(100), nullable=False),
        sa.Column('housing_type', sa.String(50), nullable=False),
        sa.Column('family_size', sa.Integer, nullable=True),
        sa.Column('employment_status', sa.String(50), nullable=True),
        sa.Column('message', sa.Text, nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_housing_applications_profile_id', 'housing_applications', ['profile_id'])
    op.create_index('ix_housing_applications_created_at', 'housing_applications', ['created_at'])


def downgrade():
    op.drop_index('ix_housing_applications_created_at', table_name='housing_applications')
    op.drop_index('ix_housing_applications_profile_id', table_name='housing_applications')
    op.drop_table('housing_applications')
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_index('ix_profiles_public_id', table_name='profiles')
    op.drop_index('ix_profiles_id', table_name='profiles')
    op.drop_table('profiles')
    op.drop_index('idx_otp_codes_email_used_created', table_name='otp_codes')
    op.drop_index('ix_otp_codes_email', table_name='otp_codes')
    op.drop_table('otp_codes')
