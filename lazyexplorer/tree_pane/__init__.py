"""Tree-pane components: the text surface and the cursor locator."""

from .locator import Locator
from .surface import MemorySurface, TextSurface

__all__ = [
    "Locator",
    "MemorySurface",
    "TextSurface",
]
