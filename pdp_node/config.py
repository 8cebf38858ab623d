"""
config.py — PDP Node Configuration
====================================
"""

import os


class Settings:
    """PDP node configuration from environment."""

    HOST: str = os.getenv("PDP_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PDP_PORT", "8100"))
    STORAGE_NODE_URL: str = os.getenv("STORAGE_NODE_URL", "http://localhost:9000")
    DATA_DIR: str = os.getenv("PDP_DATA_DIR", "/data/pdp")
    BLOCK_SIZE: int = int(os.getenv("PDP_BLOCK_SIZE", "1024"))  # 1 KB
    CHALLENGE_COUNT: int = int(os.getenv("PDP_CHALLENGE_COUNT", "10"))
    MAX_CHALLENGES: int = int(os.getenv("PDP_MAX_CHALLENGES", "256"))
    INDEX_DOMAIN: int = int(os.getenv("PDP_INDEX_DOMAIN", "1000"))
    NONCE_SIZE: int = int(os.getenv("PDP_NONCE_SIZE", "32"))  # bytes
    RETRIEVAL_TIMEOUT: float = float(os.getenv("PDP_RETRIEVAL_TIMEOUT", "30"))
    LOG_LEVEL: str = os.getenv("PDP_LOG_LEVEL", "INFO")


settings = Settings()
