from typing import Optional, Any

class GastosBotError(Exception):
    """
    Base exception for the bot.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class PersistenceError(GastosBotError):
    """
    Raised when the ledger store (Google Sheets) fails or rejects a call.
    """
    def __init__(self, message: str = "Persistence error", details: Optional[Any] = None):
        super().__init__(message, code="PERSISTENCE_ERROR", status_code=502, details=details)

class ConfigurationError(GastosBotError):
    """
    Raised when a required setting is missing at the moment it is needed.
    """
    def __init__(self, message: str = "Configuration error", details: Optional[Any] = None):
        super().__init__(message, code="CONFIGURATION_ERROR", status_code=500, details=details)
