# =======================================================================================
# ctrlbx_admin/config.py - Configuration Management
# =======================================================================================
import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

def _env_float(name: str) -> Optional[float]:
    """Helper to parse optional float environment variables."""
    v = os.getenv(name)
    try:
        return float(v) if v else None
    except ValueError:
        return None

class Config:
    # Remote spreadsheet backend (Apps Script web app); overridable at runtime
    BACKEND_URL: str = os.getenv("BACKEND_URL", "")
    GATEWAY_TIMEOUT: Optional[float] = _env_float("GATEWAY_TIMEOUT")

    # Client-side persistent storage
    STORE_URL: str = os.getenv("STORE_URL", "sqlite:///./ctrlbx_admin_state.db")

    # API Settings
    API_DEBUG: bool = os.getenv("API_DEBUG", "false").lower() == "true"
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # UI thresholds
    OFFLINE_THRESHOLD_MIN: int = int(os.getenv("OFFLINE_THRESHOLD_MIN", "5"))
    LOGS_DEFAULT_DAYS: int = int(os.getenv("LOGS_DEFAULT_DAYS", "7"))

config = Config()
