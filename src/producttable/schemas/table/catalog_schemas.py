# producttable/schemas/table/catalog_schemas.py

from typing import Optional
from pydantic import BaseModel, Field

class CatalogProductRead(BaseModel):
    id: int
    name: str
    sku: Optional[str] = None
    price: Optional[str] = Field(None, description="Formatted active price")
    image: Optional[str] = Field(None, description="Thumbnail URL")

class CategoryRead(BaseModel):
    id: int
    name: str
    slug: str
    count: int = 0

class SourceStatsRead(BaseModel):
    categories: int = 0
    products: int = 0
