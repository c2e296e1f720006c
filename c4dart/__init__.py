__version__ = "0.1.0"

from .coder import Coder  # noqa: E402
from .errors import (  # noqa: E402
    C4DartError,
    GenerationError,
    IncludeDetectionError,
    InputOutputError,
    MalformedDeclarationError,
)
from .options import Options  # noqa: E402
from .translator import Translator, translate  # noqa: E402

__all__ = [
    "C4DartError",
    "Coder",
    "GenerationError",
    "IncludeDetectionError",
    "InputOutputError",
    "MalformedDeclarationError",
    "Options",
    "Translator",
    "translate",
    "__version__",
]
