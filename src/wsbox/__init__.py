# Load .env vars from file before everything else
from dotenv import load_dotenv

load_dotenv()

from .logger import setup_logging  # noqa: E402

setup_logging()

from .config import WsboxSettings, get_settings  # noqa: E402

__all__ = ["WsboxSettings", "get_settings", "setup_logging"]
