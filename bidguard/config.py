"""
Application Configuration
Load settings from environment variables with validation
"""
import os


class Settings:
    """Application configuration from environment variables"""

    # MongoDB Configuration
    MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME", "bidguard")
    MONGODB_TLS: bool = os.getenv("MONGODB_TLS", "False").lower() == "true"

    # Perplexity Configuration (OpenAI-compatible endpoint)
    PERPLEXITY_API_KEY: str = os.getenv("PERPLEXITY_API_KEY", "") or os.getenv("ERA_API_KEY", "")
    PERPLEXITY_BASE_URL: str = os.getenv("PERPLEXITY_BASE_URL", "https://api.perplexity.ai")
    PERPLEXITY_RESEARCH_MODEL: str = os.getenv("PERPLEXITY_RESEARCH_MODEL", "sonar-pro")
    PERPLEXITY_REASONING_MODEL: str = os.getenv("PERPLEXITY_REASONING_MODEL", "sonar-reasoning")

    # Gemini Configuration (fallback provider)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "") or os.getenv("GOOGLE_API_KEY", "")
    GEMINI_BASE_URL: str = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai/")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

    # Model temperatures
    RESEARCH_TEMPERATURE: float = float(os.getenv("RESEARCH_TEMPERATURE", "0.1"))  # factual research
    REASONING_TEMPERATURE: float = float(os.getenv("REASONING_TEMPERATURE", "0.4"))  # drafting and critique
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "4000"))

    # Application Configuration
    APP_NAME: str = "BidGuard AI"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "True").lower() == "true"
    ADMIN_API_KEY: str = os.getenv("ADMIN_API_KEY", "")

    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # Background Job Configuration
    JOB_BACKEND: str = os.getenv("JOB_BACKEND", "local")  # local | celery
    CELERY_BROKER_URL: str = os.getenv("CELERY_BROKER_URL", "")
    JOB_CONCURRENCY: int = int(os.getenv("JOB_CONCURRENCY", "5"))
    JOB_MAX_RETRIES: int = int(os.getenv("JOB_MAX_RETRIES", "3"))
    JOB_RETRY_BACKOFF_SECONDS: float = float(os.getenv("JOB_RETRY_BACKOFF_SECONDS", "2"))

    # Proposal Pipeline Configuration
    MAX_REVISION_ROUNDS: int = int(os.getenv("MAX_REVISION_ROUNDS", "1"))
    CRITIQUE_ACCEPT_SCORE: float = float(os.getenv("CRITIQUE_ACCEPT_SCORE", "8.5"))
    CRITIQUE_MAX_CHARS: int = int(os.getenv("CRITIQUE_MAX_CHARS", "8000"))
    CRITIQUE_MAX_TOKENS: int = int(os.getenv("CRITIQUE_MAX_TOKENS", "2500"))

    # Credits
    DEFAULT_CREDITS: int = int(os.getenv("DEFAULT_CREDITS", "3"))

    # Tender discovery (Contracts Finder OCDS search)
    CONTRACTS_FINDER_URL: str = os.getenv(
        "CONTRACTS_FINDER_URL",
        "https://www.contractsfinder.service.gov.uk/Published/Notices/OCDS/Search",
    )
    CONTRACTS_FINDER_LIMIT: int = int(os.getenv("CONTRACTS_FINDER_LIMIT", "20"))
    CONTRACTS_FINDER_TIMEOUT: float = float(os.getenv("CONTRACTS_FINDER_TIMEOUT", "15"))

    # Company verification (Companies House public data API)
    COMPANIES_HOUSE_API_KEY: str = os.getenv("COMPANIES_HOUSE_API_KEY", "")
    COMPANIES_HOUSE_URL: str = os.getenv("COMPANIES_HOUSE_URL", "https://api.company-information.service.gov.uk")
    COMPANIES_HOUSE_TIMEOUT: float = float(os.getenv("COMPANIES_HOUSE_TIMEOUT", "10"))

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


# Initialize settings
settings = Settings()


def validate_settings() -> bool:
    """
    Validate that all required settings are configured

    Returns:
        True if all required settings are present

    Raises:
        ValueError: If required settings are missing
    """
    required_keys = {
        "PERPLEXITY_API_KEY": settings.PERPLEXITY_API_KEY,
        "MONGODB_URI": settings.MONGODB_URI,
    }
    if settings.JOB_BACKEND == "celery":
        required_keys["CELERY_BROKER_URL"] = settings.CELERY_BROKER_URL
    if not settings.DEBUG:
        required_keys["ADMIN_API_KEY"] = settings.ADMIN_API_KEY

    missing_keys = [key for key, value in required_keys.items() if not value]
    if missing_keys:
        raise ValueError(f"Missing required environment variables: {', '.join(missing_keys)}")

    return True
