"""
Main entry point for the club ledger portal.

This module initializes the application, loads configuration,
and starts the FastAPI server.
"""
import sys
from pathlib import Path

# Add project root to Python path for module imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv
from pydantic import ValidationError as SettingsValidationError

from core.config import get_settings
from core.exceptions import ConfigurationError
from core.logger import setup_logger

# Load environment variables from .env file
_env_file = PROJECT_ROOT / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    print("Warning: .env file not found. Using environment variables or defaults.")

logger = setup_logger(__name__)


def main():
    """Main application entry point."""
    try:
        # Load and validate configuration
        try:
            settings = get_settings()
        except SettingsValidationError as e:
            raise ConfigurationError("Invalid settings", details={"errors": e.errors()})

        if not settings.data_path.is_dir():
            raise ConfigurationError(
                f"Data directory not found: {settings.data_dir}",
                details={"data_dir": str(settings.data_path.resolve())}
            )

        import uvicorn
        from app.api import app

        logger.info(f"Starting {settings.app_name}")
        logger.info(f"Log Level: {settings.log_level}")
        logger.info(f"Data Directory: {settings.data_path.resolve()}")
        logger.info(f"Allowed Phones File: {settings.allowed_phones_file}")
        logger.info(f"Transactions File: {settings.transactions_file}")
        logger.info(f"Session TTL: {settings.session_ttl_hours:g}h")

        logger.info(f"Starting server on {settings.host}:{settings.port}")

        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower()
        )

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        if e.details:
            logger.error(f"Details: {e.details}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Failed to start application: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
