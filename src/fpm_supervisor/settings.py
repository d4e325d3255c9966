"""
This module contains the default configuration settings for fpm-supervisor.
It defines paths to the php-fpm binary and its data directory, readiness timing
and logging options. Values can be overridden from the environment or a .env file.
"""

import os
import pathlib
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv(override=True)

#* --- Core Paths ---
BASE_DIR = pathlib.Path.cwd()
DATA_DIR = pathlib.Path(os.getenv("FPM_DATA_DIR", str(BASE_DIR / "var")))
OVERRIDES_JSON_PATH = pathlib.Path(os.getenv("FPM_OVERRIDES_PATH", str(DATA_DIR / "overrides.json")))

#* --- Worker Executable ---
PHPFPM_PATH = os.getenv("PHPFPM_PATH", "/usr/sbin/php-fpm")
CONFIG_FILE_NAME = "php-fpm.conf"
PROCESS_NAME = "php-fpm"

#* --- Readiness Settings ---
READINESS_TIMEOUT = 4.0  # seconds before start() gives up on the listener
POLL_INTERVAL = 0.002    # seconds between connection attempts
CONNECT_TIMEOUT = 1.0    # per-attempt socket timeout

#* --- Logging ---
LOG_FILE_PATH = os.getenv("FPM_LOG_FILE") or None
VERBOSE_LOGGING = os.getenv("FPM_VERBOSE", "False").lower() in ('true', '1', 't')
PROCESS_TITLE = "FPM - Supervisor"

#* --- MODIFIABLE SETTINGS (may be overridden from overrides.json) ---
MODIFIABLE_SETTINGS = {
    "PHPFPM_PATH",
    "READINESS_TIMEOUT", "POLL_INTERVAL", "CONNECT_TIMEOUT",
    "LOG_FILE_PATH",
}
