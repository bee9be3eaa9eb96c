import os
import sys

from PyQt6.QtCore import QStandardPaths

APP_DIR_NAME = "ImageCapturer"


def get_project_root():
    """Returns absolute path to project root.
    EXE: Directory containing executable.
    DEV: Directory containing the 'imagecapturer' package.
    """
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    # Dev mode: 2 levels up from imagecapturer/utils/path_utils.py
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def is_source_checkout(root=None):
    """True when running from a frozen build or a checkout that has its pyproject.toml beside the package."""
    if getattr(sys, 'frozen', False):
        return True
    return os.path.isfile(os.path.join(root or get_project_root(), "pyproject.toml"))


def get_user_data_root():
    """Writable data area: the project root in a checkout, the per-user data dir for an installed package."""
    root = get_project_root()
    if is_source_checkout(root):
        return root
    # An installed package would otherwise write into site-packages
    base = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.GenericDataLocation)
    if not base:
        base = os.path.join(os.path.expanduser("~"), ".local", "share")
    return os.path.join(base, APP_DIR_NAME)


def get_user_data_path(relative_path=""):
    """Get absolute path to writable user data area."""
    if os.path.isabs(relative_path):
        return relative_path
    return os.path.join(get_user_data_root(), relative_path)
