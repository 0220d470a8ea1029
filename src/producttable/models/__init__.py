# producttable/models/__init__.py

from .table import ProductTable
from .catalog import CatalogProduct, CatalogTerm, catalog_product_terms
