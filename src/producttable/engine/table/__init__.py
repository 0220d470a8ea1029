from .definitions import *
from .errors import (
    TableEngineError,
    DefinitionError,
    ShapeError,
    ConfigError,
    CatalogUnavailable,
    Diagnostic,
    Diagnostics,
)
from .normalizer import normalize, migrate_legacy
from .catalog import Catalog, CatalogQuery, CatalogPage, CatalogItem, CurrencyFormat, Term, ItemImage
from .source_resolver import SourceResolver, ResolvedSource, resolve
from .columns import CellContent, RenderContext, register_column, render_cell
from .features import SortOverride, PageInfo, CartAction, build_cart_action
from .style import PresentationDescriptor, compile_style
from .output import RenderMode, RenderParams, RenderedOutput, Row, Cell, HeaderColumn
from .orchestrator import TableOrchestrator, ResolvedTable
from .preview import PreviewSession, PreviewState, PreviewOutcome, PreviewFailure
