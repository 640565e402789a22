"""PaperShelf - personal paper / bookmark catalog.

Papers are saved with a title, summary, a link and/or an uploaded PDF,
and a set of tags (or, in legacy mode, a category/subcategory pair),
then browsed by tag with autocomplete search.
"""

__version__ = "2.0.0"

from papershelf.config import Settings
from papershelf.models.paper import Paper

__all__ = ["Paper", "Settings", "__version__"]
