"""initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

Users, evidence and third parties. Owner references carry no foreign key so
removing a client leaves their records in place.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', sa.Enum('client', 'admin', name='userrole'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table('evidence',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('category', sa.Enum('policy', 'diagram', 'doc', 'other', name='evidencecategory'),
                  nullable=False),
        sa.Column('filename', sa.String(512), nullable=False),
        sa.Column('storage_path', sa.Text(), nullable=False),
        sa.Column('size', sa.Integer(), nullable=True),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_evidence_id', 'evidence', ['id'])
    op.create_index('ix_evidence_owner_id', 'evidence', ['owner_id'])
    op.create_index('ix_evidence_created_at', 'evidence', ['created_at'])

    op.create_table('third_parties',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255)),
        sa.Column('company', sa.String(255)),
        sa.Column('role', sa.String(255)),
        sa.Column('industry', sa.String(255)),
        sa.Column('risk_score', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_third_parties_id', 'third_parties', ['id'])
    op.create_index('ix_third_parties_name', 'third_parties', ['name'])
    op.create_index('ix_third_parties_industry', 'third_parties', ['industry'])
    op.create_index('ix_third_parties_created_by', 'third_parties', ['created_by'])
    op.create_index('ix_third_parties_created_at', 'third_parties', ['created_at'])


def downgrade() -> None:
    op.drop_table('third_parties')
    op.drop_table('evidence')
    op.drop_table('users')
    sa.Enum(name='evidencecategory').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
