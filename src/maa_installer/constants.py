"""
Constants and configuration values for maa-installer.

This module contains all hardcoded values, URLs, timeouts, and other constants
used throughout the application.
"""

APP_NAME = "maa-installer"

# Version metadata endpoints
DEFAULT_MAA_API_URL = "https://ota.maa.plus/MaaAssistantArknights/api/version/"
DEFAULT_CLI_API_URL = "https://github.com/MaaAssistantArknights/maa-cli/raw/version/"
DEFAULT_CLI_DOWNLOAD_URL = (
    "https://github.com/MaaAssistantArknights/maa-cli/releases/download/"
)

# Network timeouts (in seconds)
MANIFEST_REQUEST_TIMEOUT = 10
DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_CHUNK_SIZE = 8192
BYTES_PER_MEGABYTE = 1024 * 1024

# Installed component query
DEFAULT_RUNNER = "maa-run"
VERSION_QUERY_ARG = "version"
# stdout looks like "MaaCore v5.0.0\n"
CORE_VERSION_PREFIX_LEN = len("MaaCore v")
VERSION_QUERY_TIMEOUT = 30

# Archive layout
RESOURCE_COMPONENT = "resource"
ZIP_EXTENSION = ".zip"
TAR_GZ_EXTENSIONS = (".tar.gz", ".tgz")

# Directory names below the user data directory
LIBRARY_DIR_NAME = "lib"
RESOURCE_DIR_NAME = "resource"

# Configuration file names
CONFIG_FILE_NAME = "maa-installer.yaml"

# Environment variable names
MAA_API_URL_ENV_VAR = "MAA_API_URL"
MAA_CLI_API_ENV_VAR = "MAA_CLI_API"
MAA_CLI_DOWNLOAD_ENV_VAR = "MAA_CLI_DOWNLOAD"
LIBRARY_DIR_ENV_VAR = "MAA_LIBRARY_DIR"
RESOURCE_DIR_ENV_VAR = "MAA_RESOURCE_DIR"
CACHE_DIR_ENV_VAR = "MAA_CACHE_DIR"
LOG_LEVEL_ENV_VAR = "MAA_INSTALLER_LOG_LEVEL"

# Logging configuration
LOGGER_NAME = "maa_installer"
LOG_FILE_NAME = "maa-installer.log"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Strict semantic version (https://semver.org), without the leading "v"
SEMVER_REGEX_PATTERN = (
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)
