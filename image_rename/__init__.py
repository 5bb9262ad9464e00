"""Image Rename Tool - rename images from vision-model descriptions."""

from .analyzer import ImageAnalyzer
from .core import (
    AnalysisResult,
    Language,
    NameSource,
    Provider,
    RenameConfig,
    RenameOutcome,
    RenamePlan,
    RenameReport,
)
from .renamer import FileRenamer

__version__ = "1.0.0"
__description__ = "Rename image files based on their content using LLM analysis"
