"""
EPFI Configuration
Manages environment variables and defaults for palette extraction services.
"""
import os


class Config:
    """Configuration class for EPFI services."""

    # Palette refinement
    DEFAULT_TOLERANCE: float = float(os.environ.get("EPFI_DEFAULT_TOLERANCE", "50"))
    MAX_ATTEMPTS: int = int(os.environ.get("EPFI_MAX_ATTEMPTS", "100"))
    RELAX_STEP: float = float(os.environ.get("EPFI_RELAX_STEP", "5.0"))
    REFINE_TIMEOUT_S: float = float(os.environ.get("EPFI_REFINE_TIMEOUT_S", "0"))  # 0 disables
    STRICT_SIZE: bool = bool(int(os.environ.get("EPFI_STRICT_SIZE", "0")))
    QUANTIZER_SEED: int = int(os.environ.get("EPFI_QUANTIZER_SEED", "42"))

    # Swatch rendering
    STRIPE_WIDTH: int = int(os.environ.get("EPFI_STRIPE_WIDTH", "50"))
    STRIPE_HEIGHT: int = int(os.environ.get("EPFI_STRIPE_HEIGHT", "100"))
    STRIPE_WORKERS: int = int(os.environ.get("EPFI_STRIPE_WORKERS", "0"))  # 0 = executor default

    # Input limits
    MAX_FILE_MB: int = int(os.environ.get("EPFI_MAX_FILE_MB", "10"))

    # Logging
    LOG_LEVEL: str = os.environ.get("EPFI_LOG_LEVEL", "INFO")

    SAVE_EXT = ".png"

    @classmethod
    def validate_stripe_size(cls, stripe_width: int, height: int) -> bool:
        """Validate swatch stripe dimensions."""
        return stripe_width > 0 and height > 0

    @classmethod
    def stripe_workers(cls):
        """Worker count for stripe fills, None lets the executor decide."""
        return cls.STRIPE_WORKERS or None

    @classmethod
    def refine_timeout(cls):
        """Refinement deadline in seconds, None when disabled."""
        return cls.REFINE_TIMEOUT_S or None


# Global config instance
config = Config()
