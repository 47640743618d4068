"""Initial schema: users, session tokens, catalogs, rolls, audit log

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

This migration adds:
1. users (soft-deletable, email unique)
2. session_tokens (SHA-256 token hashes)
3. catalogs (code unique and immutable)
4. rolls, including uq_rolls_active_barcode: a partial unique index that
   allows one active (in_stock/reserved, not deleted) roll per barcode
5. audit_log (append-only)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261018_initial'
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_BARCODE_PREDICATE = "deleted_at IS NULL AND status IN ('in_stock', 'reserved')"


def _audit_columns():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('updated_by', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_by', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
    ]


def upgrade():
    # ==========================================================================
    # 1. USERS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='viewer'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_email'), ['email'], unique=True)
        batch_op.create_index('ix_users_role', ['role'], unique=False)
        batch_op.create_index('ix_users_deleted_at', ['deleted_at'], unique=False)

    # ==========================================================================
    # 2. SESSION TOKENS
    # ==========================================================================
    op.create_table('session_tokens',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_session_tokens_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_token_hash'), ['token_hash'], unique=True)

    # ==========================================================================
    # 3. CATALOGS
    # ==========================================================================
    op.create_table('catalogs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('material', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('image', sa.String(length=500), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('catalogs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_catalogs_code'), ['code'], unique=True)
        batch_op.create_index('ix_catalogs_status', ['status'], unique=False)
        batch_op.create_index('ix_catalogs_created_by', ['created_by'], unique=False)
        batch_op.create_index('ix_catalogs_deleted_at', ['deleted_at'], unique=False)

    # ==========================================================================
    # 4. ROLLS
    # ==========================================================================
    op.create_table('rolls',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('barcode', sa.String(length=50), nullable=False),
        sa.Column('catalog_id', sa.String(length=36), nullable=False),
        sa.Column('color', sa.String(length=50), nullable=False),
        sa.Column('degree', sa.String(length=1), nullable=False),
        sa.Column('length_meters', sa.Float(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='in_stock'),
        sa.Column('location', sa.String(length=100), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint('length_meters > 0', name='ck_rolls_length_positive'),
        sa.ForeignKeyConstraint(['catalog_id'], ['catalogs.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('rolls', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_rolls_barcode'), ['barcode'], unique=False)
        batch_op.create_index(batch_op.f('ix_rolls_catalog_id'), ['catalog_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_rolls_status'), ['status'], unique=False)
        batch_op.create_index('ix_rolls_barcode_status', ['barcode', 'status'], unique=False)
        batch_op.create_index('ix_rolls_deleted_at', ['deleted_at'], unique=False)

    op.create_index(
        'uq_rolls_active_barcode',
        'rolls',
        ['barcode'],
        unique=True,
        sqlite_where=sa.text(ACTIVE_BARCODE_PREDICATE),
        postgresql_where=sa.text(ACTIVE_BARCODE_PREDICATE),
    )

    # ==========================================================================
    # 5. AUDIT LOG
    # ==========================================================================
    op.create_table('audit_log',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('entity_type', sa.String(length=20), nullable=False),
        sa.Column('entity_id', sa.String(length=36), nullable=False),
        sa.Column('action', sa.String(length=20), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('changes', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('audit_log', schema=None) as batch_op:
        batch_op.create_index('ix_audit_entity', ['entity_type', 'entity_id'], unique=False)
        batch_op.create_index('ix_audit_user', ['user_id'], unique=False)
        batch_op.create_index('ix_audit_timestamp', ['timestamp'], unique=False)


def downgrade():
    op.drop_table('audit_log')
    op.drop_index('uq_rolls_active_barcode', table_name='rolls')
    op.drop_table('rolls')
    op.drop_table('catalogs')
    op.drop_table('session_tokens')
    op.drop_table('users')
