from pydantic import BaseModel, ConfigDict, Field


class AppRules(BaseModel):
    name: str = "luxe"
    site_url: str
    currency_symbol: str = "₦"


class LoggingRules(BaseModel):
    flush_interval_ms: int = Field(5000, gt=0)
    max_buffer: int = Field(50, gt=0)
    max_inflight_batches: int = Field(8, gt=0)


class RetryRule(BaseModel):
    retries: int = Field(0, ge=0)
    delay_ms: int = Field(0, ge=0)
    exponential_backoff: bool = False
    timeout_ms: int | None = Field(None, gt=0)


class RetryRules(BaseModel):
    default: RetryRule = Field(default_factory=RetryRule)
    # Keyed by service-label prefix ("logs" covers "logs-getAll", "logs-clear", ...)
    services: dict[str, RetryRule] = Field(default_factory=dict)


class AuthRules(BaseModel):
    algorithm: str = "HS256"


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    model_config = ConfigDict(extra="forbid")

    app: AppRules
    logging: LoggingRules = Field(default_factory=LoggingRules)
    retry: RetryRules = Field(default_factory=RetryRules)
    auth: AuthRules = Field(default_factory=AuthRules)
    ops: OpsRules = Field(default_factory=OpsRules)
