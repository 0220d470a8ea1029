from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Protocol, Literal
from pydantic import BaseModel, Field

# ============================================================================
# 1. 数据载体 (Catalog data)
# ============================================================================

class CatalogQuery(BaseModel):
    """A native catalog query; `include_ids` restricts the candidate set."""
    include_ids: Optional[List[int]] = None
    category_ids: List[int] = Field(default_factory=list)
    tag_ids: List[int] = Field(default_factory=list)
    on_sale: bool = False
    stock_status: Literal["any", "instock", "outofstock"] = "any"
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    # None = catalog default order (newest first, id as tie-break)
    order_by: Optional[Literal["date", "price", "title"]] = None
    order: Literal["ASC", "DESC"] = "DESC"

class CatalogPage(BaseModel):
    ids: List[int] = Field(default_factory=list)
    total: int = 0

class Term(BaseModel):
    id: int
    name: str
    slug: str
    link: Optional[str] = None

class ItemImage(BaseModel):
    urls: Dict[str, str] = Field(default_factory=dict)  # size name -> url
    alt: str = ""

class CatalogItem(BaseModel):
    """Read-only projection of a catalog product, as consumed by the column renderers."""
    id: int
    title: str
    permalink: str = ""
    regular_price: Optional[Decimal] = None
    sale_price: Optional[Decimal] = None
    sku: Optional[str] = None
    stock_status: Literal["instock", "outofstock", "onbackorder"] = "instock"
    stock_quantity: Optional[int] = None
    manage_stock: bool = False
    image: Optional[ItemImage] = None
    created_at: Optional[datetime] = None
    summary: Optional[str] = None
    terms: Dict[str, List[Term]] = Field(default_factory=dict)
    meta: Dict[str, str] = Field(default_factory=dict)
    purchasable: bool = True
    product_type: Literal["simple", "variable", "grouped", "external"] = "simple"

    @property
    def on_sale(self) -> bool:
        return (
            self.sale_price is not None
            and self.regular_price is not None
            and self.sale_price < self.regular_price
        )

    @property
    def effective_price(self) -> Optional[Decimal]:
        return self.sale_price if self.on_sale else self.regular_price

class CurrencyFormat(BaseModel):
    code: str = "USD"
    symbol: str = "$"
    position: Literal["left", "right", "left_space", "right_space"] = "left"
    decimals: int = 2
    thousand_separator: str = ","
    decimal_separator: str = "."

    def format(self, amount: Decimal) -> str:
        quantum = Decimal(1).scaleb(-self.decimals) if self.decimals > 0 else Decimal(1)
        value = Decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        integer, _, fraction = f"{abs(value):f}".partition(".")

        groups = []
        while len(integer) > 3:
            groups.insert(0, integer[-3:])
            integer = integer[:-3]
        groups.insert(0, integer)
        number = self.thousand_separator.join(groups)
        if self.decimals > 0:
            number = f"{number}{self.decimal_separator}{fraction}"

        if self.position == "left":
            return f"{sign}{self.symbol}{number}"
        if self.position == "left_space":
            return f"{sign}{self.symbol} {number}"
        if self.position == "right":
            return f"{sign}{number}{self.symbol}"
        return f"{sign}{number} {self.symbol}"

# ============================================================================
# 2. 协议 (Protocol)
# ============================================================================

class Catalog(Protocol):
    """
    [依赖倒置] The engine's only view of the product store.
    Implementations may raise anything; the resolver surfaces failures as CatalogUnavailable.
    """
    @property
    def currency(self) -> CurrencyFormat:
        ...

    async def query(self, query: CatalogQuery) -> CatalogPage:
        """Returns every matching id in query order (the engine paginates after projection)."""
        ...

    async def get_items(self, ids: List[int]) -> List[CatalogItem]:
        """Returns the items that exist, in any order; missing ids are simply absent."""
        ...
