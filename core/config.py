"""Scheduler configuration."""

from pydantic import BaseModel, Field

# Hard limits shared by the store contract and the services.
MAX_PENDING = 10
MAX_BATCH_SIZE = 50
MAX_CONTENT_LENGTH = 1000
DEFAULT_ISSUER_OFFSET_MINUTES = -240


class SchedulerConfig(BaseModel):
    """
    Scheduling and dispatch configuration.

    Durations are in seconds. The issuer offset is a fixed UTC offset in
    minutes used to interpret locally-phrased dates (single-timezone
    deployment); it is passed explicitly to every resolver call.
    """

    # Scheduling limits
    max_pending: int = Field(
        default=MAX_PENDING,
        description="Max PENDING jobs a single owner may hold",
        ge=1,
        le=MAX_PENDING,
    )
    max_content_length: int = Field(
        default=MAX_CONTENT_LENGTH,
        description="Max message body length in characters",
        ge=1,
        le=MAX_CONTENT_LENGTH,
    )
    command_keyword: str = Field(
        default="/schedule",
        description="Keyword that starts a structured schedule command",
        min_length=2,
    )
    issuer_offset_minutes: int = Field(
        default=DEFAULT_ISSUER_OFFSET_MINUTES,
        description="Issuer UTC offset in minutes (Chile, UTC-4)",
        gt=-1440,
        lt=1440,
    )

    # Dispatch
    dispatch_interval_seconds: float = Field(
        default=30,
        description="Interval between dispatch ticks",
        gt=0,
    )
    max_batch_size: int = Field(
        default=MAX_BATCH_SIZE,
        description="Max due jobs fetched per tick",
        ge=1,
        le=MAX_BATCH_SIZE,
    )
    max_attempts: int = Field(
        default=3,
        description="Delivery attempts per job before FAILED_TO_SEND",
        ge=1,
        le=10,
    )
    retry_delay_seconds: float = Field(
        default=5,
        description="Blocking delay between attempts for the same job",
        ge=0,
    )
    inter_job_delay_seconds: float = Field(
        default=1,
        description="Delay between distinct jobs in a batch",
        ge=0,
    )
    dispatch_lock_seconds: int = Field(
        default=300,
        description="TTL of the cross-process dispatch lock",
        ge=1,
    )

    # Viewing
    page_size: int = Field(
        default=10,
        description="Jobs per page when listing pending messages",
        ge=1,
        le=50,
    )
