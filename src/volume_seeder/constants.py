"""
Default configuration values for the volume seeder.
"""
from pathlib import Path

# Root of the downstream application inside the image
DEFAULT_APP_ROOT = Path("/app/ComfyUI")

# Build-time default snapshots, kept outside any mount point so volumes can't hide them
DEFAULT_SNAPSHOT_ROOT = Path("/opt/volume-seeder/defaults")

DEFAULT_CONFIG_PATH = Path("/etc/volume-seeder/seeder.toml")

# Environment variables read by the process-start entry point
ENV_PREFIX = "SEEDER"
ENV_CONFIG_PATH = "SEEDER_CONFIG"
ENV_FILE = "SEEDER_ENV_FILE"
ENV_LOG_LEVEL = "SEEDER_LOG_LEVEL"
ENV_LOG_FILE = "SEEDER_LOG_FILE"
ENV_MODE = "SEEDER_ENV"

# Managed directories: (name, emptiness test, subpath checked by the test)
DEFAULT_MANAGED_DIRECTORIES = [
    ("models", "is_empty", None),
    ("custom_nodes", "is_empty", None),
    ("input", "path_missing", "3d"),
]

# Downstream service launched after seeding, run from the app root
DEFAULT_SERVICE_COMMAND = ["python", "main.py", "--listen", "0.0.0.0", "--port", "8188"]

# Exit codes
EXIT_OK = 0
EXIT_SEED_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127

# Logging
PRODUCTION_LOG_DIR = Path("/var/log/volume-seeder")
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
