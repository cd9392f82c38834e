"""Application configuration. Loads from environment and .env file."""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Load .env from cwd, then project root .env
load_dotenv()
load_dotenv(BASE_DIR / ".env")


def default_worker_count() -> int:
    """Available parallelism minus one for the coordinator, never below one."""
    return max(1, (os.cpu_count() or 1) - 1)


# Paths (override with env)
INPUT_DIR = Path(os.getenv("INPUT_DIR", "./images"))
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", "./optimised"))

# Input formats the codec can decode
SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".tiff", ".tif"}
OUTPUT_EXTENSION = ".png"

# PNG encoder policy (fixed, not read from env)
PNG_QUALITY = 80
PNG_COMPRESSION_LEVEL = 9  # 0-9
PNG_EFFORT = 10  # 0-10
PNG_PALETTE = True
PNG_ADAPTIVE_FILTERING = True

# Concurrency
WORKER_COUNT = int(os.getenv("WORKER_COUNT", str(default_worker_count())))
# Seconds between liveness checks while the coordinator waits for a result
WORKER_POLL_INTERVAL = float(os.getenv("WORKER_POLL_INTERVAL", "1.0"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("optimizer")
