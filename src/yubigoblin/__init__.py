"""YubiGoblin - YubiKey second factor enrollment for sudo and the login screen."""

__version__ = "1.0.0"

from .config import get_config_manager  # noqa: E402
from .enroll import EnrollmentEngine  # noqa: E402

__all__ = ["EnrollmentEngine", "get_config_manager", "__version__"]
