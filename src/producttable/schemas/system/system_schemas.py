# producttable/schemas/system/system_schemas.py

from pydantic import BaseModel, Field

class SystemStatusRead(BaseModel):
    catalog_available: bool = Field(..., description="Whether the product catalog could be queried")
    product_count: int = 0
    table_count: int = 0
    version: str
