import logging
from typing import List, Optional, Dict, Tuple
from pydantic import BaseModel

logger = logging.getLogger(__name__)

# ============================================================================
# 1. 致命错误 (Fatal errors)
# ============================================================================

class TableEngineError(Exception):
    """Base class for every error raised by the table engine."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class DefinitionError(TableEngineError):
    """Raised by normalize() before any catalog call is made."""
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)

class ShapeError(DefinitionError):
    """A required discriminant (column type, source kind) is absent or not in its closed set."""
    pass

class ConfigError(DefinitionError):
    """The definition is well-shaped but semantically illegal (e.g. nested combined columns)."""
    pass

class CatalogUnavailable(TableEngineError):
    """The catalog collaborator failed or timed out; fatal for the current cycle only."""
    pass

# ============================================================================
# 2. 非致命诊断 (Non-fatal diagnostics)
# ============================================================================

class DiagnosticKind:
    RESOLUTION = "resolution_degeneracy"
    RENDER = "render_fallback"
    FEATURE = "feature_ignored"

class Diagnostic(BaseModel):
    kind: str
    code: str
    message: str
    column_id: Optional[str] = None
    count: int = 1

class Diagnostics:
    """
    Collects warnings recorded alongside a successful output.
    Repeated warnings for the same (code, column) are merged and counted,
    so a bad column produces one entry no matter how many rows it spans.
    """
    def __init__(self):
        self._entries: Dict[Tuple[str, Optional[str]], Diagnostic] = {}

    def warn(self, kind: str, code: str, message: str, column_id: Optional[str] = None) -> None:
        key = (code, column_id)
        existing = self._entries.get(key)
        if existing is not None:
            existing.count += 1
            return
        logger.warning(f"[{kind}] {code}: {message}")
        self._entries[key] = Diagnostic(kind=kind, code=code, message=message, column_id=column_id)

    def resolution(self, code: str, message: str) -> None:
        self.warn(DiagnosticKind.RESOLUTION, code, message)

    def render(self, code: str, message: str, column_id: Optional[str] = None) -> None:
        self.warn(DiagnosticKind.RENDER, code, message, column_id)

    def feature(self, code: str, message: str) -> None:
        self.warn(DiagnosticKind.FEATURE, code, message)

    @property
    def entries(self) -> List[Diagnostic]:
        return list(self._entries.values())

    def codes(self) -> List[str]:
        return [entry.code for entry in self._entries.values()]

    def __len__(self) -> int:
        return len(self._entries)
