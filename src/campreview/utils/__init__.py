"""Utility modules for campreview."""

from campreview.utils.logging_config import set_package_level, setup_logger
from campreview.utils.path_utils import ensure_dir, unique_path

__all__ = ["setup_logger", "set_package_level", "ensure_dir", "unique_path"]
