from .cli import main
from .settings import Settings

__version__ = "1.0.0"

__all__ = ["Settings", "main"]
