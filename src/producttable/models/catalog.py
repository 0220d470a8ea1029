# producttable/models/catalog.py

from sqlalchemy import (
    Column, Integer, String, Text, Boolean, JSON, Numeric, DateTime, ForeignKey,
    Table, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from producttable.db.base import Base

# 产品 <-> 分类/标签 关联表
catalog_product_terms = Table(
    'catalog_product_terms',
    Base.metadata,
    Column('product_id', Integer, ForeignKey('catalog_products.id', ondelete='CASCADE'), primary_key=True),
    Column('term_id', Integer, ForeignKey('catalog_terms.id', ondelete='CASCADE'), primary_key=True),
)

class CatalogTerm(Base):
    __tablename__ = 'catalog_terms'

    id = Column(Integer, primary_key=True)
    taxonomy = Column(String(32), nullable=False, index=True, comment="product_cat, product_tag, ...")
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    parent_id = Column(Integer, ForeignKey('catalog_terms.id', ondelete='SET NULL'), nullable=True)

    products = relationship("CatalogProduct", secondary=catalog_product_terms, back_populates="terms")

    __table_args__ = (
        UniqueConstraint('taxonomy', 'slug', name='uq_catalog_terms_taxonomy_slug'),
    )

class CatalogProduct(Base):
    __tablename__ = 'catalog_products'

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False, index=True)
    slug = Column(String(255), nullable=False, unique=True)
    sku = Column(String(100), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="publish", comment="Only 'publish' products are listed")

    regular_price = Column(Numeric(12, 2), nullable=True)
    sale_price = Column(Numeric(12, 2), nullable=True)

    stock_status = Column(String(20), nullable=False, default="instock", comment="instock | outofstock | onbackorder")
    stock_quantity = Column(Integer, nullable=True)
    manage_stock = Column(Boolean, nullable=False, default=False)
    purchasable = Column(Boolean, nullable=False, default=True)
    product_type = Column(String(20), nullable=False, default="simple", comment="simple | variable | grouped | external")

    image_urls = Column(JSON, nullable=True, comment="size name -> url")
    image_alt = Column(String(255), nullable=True)
    summary = Column(Text, nullable=True)
    meta = Column(JSON, nullable=True, comment="Custom field values keyed by meta key")

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    terms = relationship("CatalogTerm", secondary=catalog_product_terms, back_populates="products", lazy="selectin")
