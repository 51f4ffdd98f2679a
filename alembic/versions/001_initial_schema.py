"""Initial schema for certification records

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-16

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create accounts table
    op.create_table(
        'accounts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False, comment='Employee display name'),
        sa.Column('internal_nik', sa.String(length=50), nullable=True,
                  comment='Internal employee number (NIK)'),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False),
        sa.PrimaryKeyConstraint('id'),
        comment='Employee directory'
    )
    op.create_index('idx_accounts_created_at', 'accounts', ['created_at'])

    # Create account_certifications table
    op.create_table(
        'account_certifications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('account_id', sa.String(length=36), nullable=False,
                  comment='Employee the certification belongs to'),
        sa.Column('entry_date', sa.Date(), nullable=True, comment='Date the record was logged'),
        sa.Column('cert_type', sa.String(length=255), nullable=False,
                  comment='Free-text certification category'),
        sa.Column('cert_name', sa.String(length=255), nullable=False, comment='Certification title'),
        sa.Column('cert_date', sa.Date(), nullable=False, comment='Date of certification'),
        sa.Column('file_id', sa.String(length=255), nullable=True,
                  comment='Google Drive file id of the certificate document'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        comment='Employee certification records'
    )

    # Create indexes on account_certifications table
    op.create_index('idx_account_certifications_account', 'account_certifications', ['account_id'])
    op.create_index('idx_account_certifications_entry_date', 'account_certifications', ['entry_date'])
    op.create_index('idx_account_certifications_cert_type', 'account_certifications', ['cert_type'])


def downgrade() -> None:
    # Drop account_certifications table and indexes
    op.drop_index('idx_account_certifications_cert_type', table_name='account_certifications')
    op.drop_index('idx_account_certifications_entry_date', table_name='account_certifications')
    op.drop_index('idx_account_certifications_account', table_name='account_certifications')
    op.drop_table('account_certifications')

    # Drop accounts table and indexes
    op.drop_index('idx_accounts_created_at', table_name='accounts')
    op.drop_table('accounts')
