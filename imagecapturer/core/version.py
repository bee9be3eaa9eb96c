"""
Image Capturer - Version Constants
This file contains version information for the application.
Update VERSION_PATCH when code changes are made.
"""

APP_NAME = "Image Capturer"
VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0
VERSION = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"
VERSION_STRING = f"{APP_NAME} v{VERSION}"
