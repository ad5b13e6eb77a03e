"""Reading and writing tree files in the interchange format."""

from .errors import LoaderError
from .tree_file import export_json, import_json, load_tree, parse_tree, save_tree

__all__ = ["LoaderError", "export_json", "import_json", "load_tree", "parse_tree", "save_tree"]
