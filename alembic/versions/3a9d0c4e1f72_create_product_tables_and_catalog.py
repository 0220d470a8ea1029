"""create product tables and catalog

Revision ID: 3a9d0c4e1f72
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a9d0c4e1f72'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'product_tables',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('status', sa.Enum('DRAFT', 'PUBLISHED', name='tablestatus'), nullable=False),
        sa.Column('source', sa.JSON(), nullable=True),
        sa.Column('columns', sa.JSON(), nullable=True),
        sa.Column('settings', sa.JSON(), nullable=True),
        sa.Column('style', sa.JSON(), nullable=True),
        sa.Column('legacy_config', sa.JSON(), nullable=True, comment='Opaque pre-structured configuration blob'),
        sa.Column('revision', sa.Integer(), nullable=False, comment='Optimistic concurrency counter'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_product_tables')),
    )
    op.create_index('ix_product_tables_created_at', 'product_tables', ['created_at'], unique=False)
    op.create_index(op.f('ix_product_tables_status'), 'product_tables', ['status'], unique=False)

    op.create_table(
        'catalog_terms',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('taxonomy', sa.String(length=32), nullable=False, comment='product_cat, product_tag, ...'),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(
            ['parent_id'], ['catalog_terms.id'],
            name=op.f('fk_catalog_terms_parent_id_catalog_terms'), ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_catalog_terms')),
        sa.UniqueConstraint('taxonomy', 'slug', name='uq_catalog_terms_taxonomy_slug'),
    )
    op.create_index(op.f('ix_catalog_terms_taxonomy'), 'catalog_terms', ['taxonomy'], unique=False)

    op.create_table(
        'catalog_products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('sku', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, comment="Only 'publish' products are listed"),
        sa.Column('regular_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('sale_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('stock_status', sa.String(length=20), nullable=False, comment='instock | outofstock | onbackorder'),
        sa.Column('stock_quantity', sa.Integer(), nullable=True),
        sa.Column('manage_stock', sa.Boolean(), nullable=False),
        sa.Column('purchasable', sa.Boolean(), nullable=False),
        sa.Column('product_type', sa.String(length=20), nullable=False, comment='simple | variable | grouped | external'),
        sa.Column('image_urls', sa.JSON(), nullable=True, comment='size name -> url'),
        sa.Column('image_alt', sa.String(length=255), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True, comment='Custom field values keyed by meta key'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_catalog_products')),
        sa.UniqueConstraint('slug', name=op.f('uq_catalog_products_slug')),
    )
    op.create_index(op.f('ix_catalog_products_title'), 'catalog_products', ['title'], unique=False)
    op.create_index(op.f('ix_catalog_products_sku'), 'catalog_products', ['sku'], unique=False)
    op.create_index(op.f('ix_catalog_products_created_at'), 'catalog_products', ['created_at'], unique=False)

    op.create_table(
        'catalog_product_terms',
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('term_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ['product_id'], ['catalog_products.id'],
            name=op.f('fk_catalog_product_terms_product_id_catalog_products'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['term_id'], ['catalog_terms.id'],
            name=op.f('fk_catalog_product_terms_term_id_catalog_terms'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('product_id', 'term_id', name=op.f('pk_catalog_product_terms')),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('catalog_product_terms')
    op.drop_index(op.f('ix_catalog_products_created_at'), table_name='catalog_products')
    op.drop_index(op.f('ix_catalog_products_sku'), table_name='catalog_products')
    op.drop_index(op.f('ix_catalog_products_title'), table_name='catalog_products')
    op.drop_table('catalog_products')
    op.drop_index(op.f('ix_catalog_terms_taxonomy'), table_name='catalog_terms')
    op.drop_table('catalog_terms')
    op.drop_index(op.f('ix_product_tables_status'), table_name='product_tables')
    op.drop_index('ix_product_tables_created_at', table_name='product_tables')
    op.drop_table('product_tables')
    sa.Enum(name='tablestatus').drop(op.get_bind(), checkfirst=True)
