"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_GRAPHQL_ENDPOINTS = [
    "https://www.metadao.fi/api/graphql",
    "https://prod.backend.metadao.fi/v1/graphql",
    "https://api.metadao.fi/v1/graphql",
    "https://indexer.metadao.fi/v1/graphql",
]


class ProposalConfig(BaseModel):
    pubkey: str = "6cdhy4j6CAAJjE1z2iQDsFda2BrqJkhtHrRWT9QasSoa"
    project_slug: str = "ranger"
    site_url: str = "https://www.metadao.fi"
    governance_symbol: str = "RNGR"


class SourcesConfig(BaseModel):
    graphql_endpoints: list[str] = Field(default_factory=lambda: list(DEFAULT_GRAPHQL_ENDPOINTS))
    market_api_url: str = "https://market-api.metadao.fi"
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    request_timeout_s: float = 15.0
    # Pacing before the static page request
    page_delay_s: float = 2.0
    interstitial_timeout_s: float = 30.0
    settle_delay_s: float = 5.0
    navigation_timeout_s: float = 60.0
    browser_enabled: bool = True
    disabled: list[str] = Field(default_factory=list)
    # Percentage points
    threshold_tolerance: float = 0.1


class HistoryConfig(BaseModel):
    backend: Literal["json", "sql"] = "json"
    path: str = "threshold_history.json"
    database_url: str = "sqlite:///threshold_history.db"
    max_entries: int = Field(default=168, gt=0)


class ReportConfig(BaseModel):
    pass_threshold: float = 3.0
    lookback_minutes: int = 60
    tolerance_minutes: int = 10


class TelegramConfig(BaseModel):
    bot_token: str = ""
    chat_id: str = ""


class ScheduleConfig(BaseModel):
    interval_s: int = 3600


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"


class AppConfig(BaseModel):
    proposal: ProposalConfig = Field(default_factory=ProposalConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
