from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="QKD_", env_file=".env", extra="ignore")

    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = ["*"]

    # Digest used for privacy amplification
    DIGEST_ALGORITHM: str = "sha256"

    # Fixed seed for reproducible runs; None draws fresh entropy per run
    RANDOM_SEED: Optional[int] = None

    MAX_NUM_QUBITS: int = 100_000
    MAX_BATCH_TRIALS: int = 500
    # Upper bound on trials * numQubits for a single batch request
    MAX_BATCH_QUBITS: int = 2_000_000

settings = Settings()
