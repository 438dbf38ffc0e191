"""Domain models of the collection mapper.

Cell values at the decoder boundary, the classification of the No.CHq /Bd
column, the CollectionRecord output entity, diagnostics and run results.
"""

from .cells import DateValue, Empty, Number, RawRow, RawValue, Text, Unknown, to_cell
from .classification import ClassificationPolicy, ClassificationResult, CollectionKind
from .collection_record import CollectionRecord
from .config_models import MapperConfig
from .diagnostic import Diagnostic, DiagnosticKind
from .row_data import RowData
from .sheet_process import SheetProcess

__all__ = [
    # Cells
    "DateValue",
    "Empty",
    "Number",
    "RawRow",
    "RawValue",
    "Text",
    "Unknown",
    "to_cell",
    # Classification
    "ClassificationPolicy",
    "ClassificationResult",
    "CollectionKind",
    # Records and diagnostics
    "CollectionRecord",
    "Diagnostic",
    "DiagnosticKind",
    # Configuration / processing
    "MapperConfig",
    "RowData",
    "SheetProcess",
]
