"""
Configuration management for the browser sync coordinator
"""
import os
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class CoordinatorConfig(BaseModel):
    """Timing knobs of the coordination core (milliseconds)"""
    coordinator_id: str = "sync-coordinator"
    leader_timeout_ms: int = Field(default=8000, gt=0)  # must match the extension's LEADER_TIMEOUT
    presence_timeout_ms: int = Field(default=30000, gt=0)
    sweep_interval_ms: int = Field(default=10000, gt=0)
    warning_after_ms: int = Field(default=10000, ge=0)
    default_tag: str = "5"

    @model_validator(mode="after")
    def check_timeout_ordering(self) -> "CoordinatorConfig":
        # A leader must be displaceable by timeout before its record can be evicted
        if self.presence_timeout_ms <= self.leader_timeout_ms:
            raise ValueError(
                "presence_timeout_ms must be greater than leader_timeout_ms"
            )
        return self


class ServerConfig(BaseModel):
    """Configuration for the HTTP server"""
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    max_payload_mb: int = Field(default=10, gt=0)
    cors_origin: str = "*"


class LoggingConfig(BaseModel):
    """Logging settings"""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Config(BaseModel):
    """Main configuration class"""
    coordinator: CoordinatorConfig = Field(default_factory=CoordinatorConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables"""
        coordinator = CoordinatorConfig(
            leader_timeout_ms=int(os.getenv("LEADER_TIMEOUT_MS", "8000")),
            presence_timeout_ms=int(os.getenv("PRESENCE_TIMEOUT_MS", "30000")),
            sweep_interval_ms=int(os.getenv("SWEEP_INTERVAL_MS", "10000")),
        )
        return cls(
            coordinator=coordinator,
            server=ServerConfig(
                host=os.getenv("HOST", "0.0.0.0"),
                port=int(os.getenv("PORT", "3000")),
            ),
            logging=LoggingConfig(level=os.getenv("LOG_LEVEL", "INFO")),
        )

    @classmethod
    def load_from_file(cls, file_path: str) -> "Config":
        """Load configuration from JSON file"""
        import json
        with open(file_path, 'r') as f:
            data = json.load(f)
        return cls(**data)

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to JSON file"""
        import json
        with open(file_path, 'w') as f:
            json.dump(self.model_dump(), f, indent=2)
