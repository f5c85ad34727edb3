from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FILE_TEMPLATES = (
    "https://{pointer}.ipfs.w3s.link,"
    "https://{pointer}.ipfs.nftstorage.link,"
    "https://{pointer}.ipfs.dweb.link"
)
DEFAULT_PATH_TEMPLATES = (
    "https://w3s.link/ipfs/{pointer},"
    "https://nftstorage.link/ipfs/{pointer},"
    "https://dweb.link/ipfs/{pointer}"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # On-chain snapshot registry (read-only).
    REGISTRY_RPC_URL: str | None = None
    REGISTRY_ADDRESS: str | None = None

    # Bulk snapshot API (SQLite-backed service that mirrors what gets pinned).
    SNAPSHOT_API_URL: str = "http://127.0.0.1:8000/snapshots"

    # Content mirrors. Comma-separated URL templates with a {pointer} placeholder.
    # FILE templates address a bare CID, PATH templates a "rootCID/filename" pointer.
    GATEWAY_FILE_TEMPLATES: str = DEFAULT_FILE_TEMPLATES
    GATEWAY_PATH_TEMPLATES: str = DEFAULT_PATH_TEMPLATES
    GATEWAY_TIMEOUT_SECONDS: float = 15.0
    SNAPSHOT_MAX_ATTEMPTS: int = 3

    # Snapshots are stamped at the prior NY close; trading days are reported in this zone.
    REPORTING_TZ: str = "America/New_York"

    @property
    def registry_rpc_url(self) -> str | None:
        return self.REGISTRY_RPC_URL

    @property
    def registry_address(self) -> str | None:
        return self.REGISTRY_ADDRESS

    @property
    def snapshot_api_url(self) -> str:
        return self.SNAPSHOT_API_URL

    @property
    def file_templates(self) -> list[str]:
        return _split_templates(self.GATEWAY_FILE_TEMPLATES)

    @property
    def path_templates(self) -> list[str]:
        return _split_templates(self.GATEWAY_PATH_TEMPLATES)

    @property
    def gateway_timeout(self) -> float:
        return float(self.GATEWAY_TIMEOUT_SECONDS)

    @property
    def max_attempts(self) -> int:
        return max(1, int(self.SNAPSHOT_MAX_ATTEMPTS))

    @property
    def reporting_tz(self) -> str:
        return (self.REPORTING_TZ or "America/New_York").strip()


def _split_templates(raw: str) -> list[str]:
    return [t.strip() for t in (raw or "").split(",") if t.strip()]


def load_settings() -> Settings:
    return Settings()
