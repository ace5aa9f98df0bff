from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX: str = "NEW_RELIC_"
PROPERTY_PREFIX: str = "newrelic.config."
DEFAULT_CONFIG_FILE: str = "newrelic.yml"
REDACTED: str = "***REDACTED***"
SECRET_KEYS: tuple[str, ...] = (
    "license_key",
    "proxy_password",
    "insert_key",
)


class EventSamplingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    enabled: bool = Field(default=True, description="collect this event type")
    max_samples_stored: int = Field(
        default=2000, ge=0, description="reservoir size per harvest cycle"
    )


class CustomInsightsEventsConfig(EventSamplingConfig):
    max_samples_stored: int = Field(default=30000, ge=0)
    max_attribute_value: int = Field(default=255, ge=0, description="max chars per attribute value")


class ErrorCollectorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    enabled: bool = True
    capture_events: bool = True
    max_event_samples_stored: int = Field(default=100, ge=0)
    ignore_classes: list[str] = Field(default_factory=list)
    ignore_status_codes: list[str] = Field(default=["404"])


class ForwardingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    enabled: bool = True
    max_samples_stored: int = Field(default=10000, ge=0)


class ToggleConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    enabled: bool = False


class ApplicationLoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    enabled: bool = True
    forwarding: ForwardingConfig = Field(default_factory=ForwardingConfig)
    metrics: ToggleConfig = Field(default_factory=lambda: ToggleConfig(enabled=True))
    local_decorating: ToggleConfig = Field(default_factory=ToggleConfig)


class TransactionTracerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    enabled: bool = True
    record_sql: str = Field(default="obfuscated", description="off | obfuscated | raw")
    transaction_threshold: str = "apdex_f"
    stack_trace_threshold: str = "0.5"
    explain_enabled: bool = True
    top_n: int = Field(default=20, ge=0)


class AttributesConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    enabled: bool = True
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)


class AgentSettings(BaseModel):
    """
    Built-in agent defaults, the lowest configuration layer.

    Fields defaulting to None are registered setting names without a built-in
    value; they only appear in the effective config when a higher layer sets them.
    """

    model_config = ConfigDict(extra="forbid")

    # 1. Identity & transport
    app_name: str = Field(default="My Application", description="application name in the UI")
    license_key: Optional[str] = Field(default=None, description="account license key")
    insert_key: Optional[str] = None
    host: Optional[str] = None
    proxy_host: Optional[str] = None
    proxy_port: Optional[int] = None
    proxy_user: Optional[str] = None
    proxy_password: Optional[str] = None

    # 2. Agent runtime
    agent_enabled: bool = True
    log_level: str = "info"
    log_file_count: int = Field(default=1, ge=1)
    audit_mode: bool = False
    high_security: bool = False

    # 3. Data volume
    transaction_events: EventSamplingConfig = Field(default_factory=EventSamplingConfig)
    span_events: EventSamplingConfig = Field(default_factory=EventSamplingConfig)
    custom_insights_events: CustomInsightsEventsConfig = Field(
        default_factory=CustomInsightsEventsConfig
    )
    error_collector: ErrorCollectorConfig = Field(default_factory=ErrorCollectorConfig)
    application_logging: ApplicationLoggingConfig = Field(
        default_factory=ApplicationLoggingConfig
    )
    transaction_tracer: TransactionTracerConfig = Field(default_factory=TransactionTracerConfig)
    slow_sql: ToggleConfig = Field(default_factory=lambda: ToggleConfig(enabled=True))
    thread_profiler: ToggleConfig = Field(default_factory=lambda: ToggleConfig(enabled=True))
    jfr: ToggleConfig = Field(default_factory=ToggleConfig)
    distributed_tracing: ToggleConfig = Field(default_factory=lambda: ToggleConfig(enabled=True))
    attributes: AttributesConfig = Field(default_factory=AttributesConfig)
