import asyncio
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

# --- Path Setup ---
# This ensures the script can be run from the project root and find the 'producttable' package.
# Example command from project root: `python scripts/seed_initial_data.py`
try:
    import producttable
except ImportError:
    sys.path.append(str(Path(__file__).resolve().parent.parent / "src"))

from producttable.core.config import settings
from producttable.models import CatalogProduct, CatalogTerm, ProductTable
from producttable.engine.table.definitions import TableStatus
from producttable.engine.table.normalizer import normalize

# --- Setup Logging ---
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# --- Seed file schemas ---

class TermSeed(BaseModel):
    taxonomy: str
    name: str
    slug: str
    parent: Optional[str] = None

class ProductSeed(BaseModel):
    title: str
    slug: str
    sku: Optional[str] = None
    regular_price: Optional[Decimal] = None
    sale_price: Optional[Decimal] = None
    stock_status: str = "instock"
    stock_quantity: Optional[int] = None
    manage_stock: bool = False
    purchasable: bool = True
    product_type: str = "simple"
    image_urls: Optional[Dict[str, str]] = None
    image_alt: Optional[str] = None
    summary: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    terms: List[str] = Field(default_factory=list)

class TableSeed(BaseModel):
    title: str
    status: TableStatus = TableStatus.DRAFT
    source: Optional[Dict[str, Any]] = None
    columns: Optional[List[Dict[str, Any]]] = None
    settings: Optional[Dict[str, Any]] = None
    style: Optional[Dict[str, Any]] = None
    legacy_config: Optional[Dict[str, Any]] = None

# --- Data Loading and Validation Helper ---
SEED_DATA_DIR = Path(__file__).resolve().parent.parent / "seed_data"

def _load_and_validate_data(file_name: str, schema: Type[BaseModel]) -> List[BaseModel]:
    """
    Helper to load, parse, and robustly validate data from a JSON file.
    """
    path = SEED_DATA_DIR / file_name
    if not path.exists():
        logger.error(f"Seed data file not found: {path}")
        raise FileNotFoundError(f"Seed data file not found: {path}")

    logger.info(f"  - Loading and validating {file_name}...")
    data = json.loads(path.read_text())
    try:
        return [schema.model_validate(item) for item in data]
    except ValidationError as e:
        logger.critical(f"FATAL: Validation failed for {file_name}. See details below.")
        for error in e.errors():
            logger.critical(f"  - Location: {error['loc']} | Error: {error['msg']}")
        raise

# --- Modular Seeding Functions (in dependency order) ---

async def _seed_terms(db: AsyncSession) -> Dict[str, CatalogTerm]:
    data = _load_and_validate_data("catalog_terms.json", TermSeed)
    by_slug: Dict[str, CatalogTerm] = {}
    for item in data:
        term = CatalogTerm(taxonomy=item.taxonomy, name=item.name, slug=item.slug)
        if item.parent:
            term.parent_id = by_slug[item.parent].id
        db.add(term)
        await db.flush()
        by_slug[item.slug] = term
    return by_slug

async def _seed_products(db: AsyncSession, terms: Dict[str, CatalogTerm]) -> None:
    data = _load_and_validate_data("catalog_products.json", ProductSeed)
    for item in data:
        values = item.model_dump(exclude={"terms"})
        product = CatalogProduct(**values, terms=[terms[slug] for slug in item.terms])
        db.add(product)
    await db.flush()

async def _seed_tables(db: AsyncSession) -> None:
    data = _load_and_validate_data("product_tables.json", TableSeed)
    for item in data:
        if item.legacy_config is not None:
            # 旧版配置原样保存, 读取时迁移
            db.add(ProductTable(title=item.title, status=item.status, legacy_config=item.legacy_config, revision=1))
            continue
        definition = normalize(item.model_dump(exclude={"legacy_config"}, exclude_none=True, mode="json"))
        dumped = definition.dump()
        db.add(ProductTable(
            title=definition.title,
            status=definition.status,
            source=dumped["source"],
            columns=dumped["columns"],
            settings=dumped["settings"],
            style=dumped["style"],
            revision=1,
        ))
    await db.flush()

# --- Main Orchestrator ---

async def seed_all_data(db: AsyncSession):
    """Orchestrates the entire seeding process in the correct order."""
    # 1. Idempotency Check
    if await db.scalar(select(func.count(CatalogProduct.id))) > 0:
        logger.warning("Data appears to be already seeded. Skipping.")
        return

    logger.info("Starting database seeding process...")
    logger.info("Step: Seeding Catalog Terms...")
    terms = await _seed_terms(db)
    logger.info("Step: Seeding Catalog Products...")
    await _seed_products(db, terms)
    logger.info("Step: Seeding Product Tables...")
    await _seed_tables(db)
    logger.info("Database seeding process completed successfully.")

# --- Main execution block ---

async def main():
    """Sets up the database connection and runs the seeding orchestrator within a single transaction."""
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with AsyncSessionLocal() as db:
            async with db.begin():  # Single transaction for the whole process
                await seed_all_data(db)
    except Exception:
        logger.critical("FATAL ERROR during seeding: the transaction has been rolled back.", exc_info=True)
        sys.exit(1)
    finally:
        await engine.dispose()

if __name__ == "__main__":
    logger.info("Running seed script as a standalone process...")
    asyncio.run(main())
