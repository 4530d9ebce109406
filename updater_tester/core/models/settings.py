"""
TesterSettings — endpoints, timeouts and tool lists for one run.

Defaults reproduce the upstream layout the updaters rely on. A YAML file
can override any field (see ``core.config.loader``).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Timeouts(BaseModel):
    """Per-operation network bounds, in seconds."""

    connect: int = 7
    probe: int = 20     # HEAD / spider requests
    fetch: int = 25     # bodies read into memory
    download: int = 35  # bodies written to the scratch dir
    range: int = 25     # byte-range snippets


class Endpoints(BaseModel):
    """Upstream URLs probed by the tester."""

    internet: dict[str, str] = Field(
        default_factory=lambda: {
            "github.com": "https://github.com/",
            "api.github.com": "https://api.github.com/",
            "static.rust-lang.org": "https://static.rust-lang.org/",
        }
    )
    rust_manifest: str = "https://static.rust-lang.org/dist/channel-rust-stable.toml"
    github_web: str = "https://github.com"
    github_api: str = "https://api.github.com"
    fastfetch_repo: str = "fastfetch-cli/fastfetch"

    @property
    def fastfetch_api_latest(self) -> str:
        return f"{self.github_api}/repos/{self.fastfetch_repo}/releases/latest"

    @property
    def fastfetch_latest_page(self) -> str:
        return f"{self.github_web}/{self.fastfetch_repo}/releases/latest"

    def fastfetch_api_tag(self, tag: str) -> str:
        return f"{self.github_api}/repos/{self.fastfetch_repo}/releases/tags/{tag}"

    def fastfetch_release_page(self, tag: str) -> str:
        return f"{self.github_web}/{self.fastfetch_repo}/releases/tag/{tag}"


class ToolLists(BaseModel):
    """Local tools each section expects on PATH."""

    base: list[str] = Field(
        default_factory=lambda: [
            "uname", "awk", "grep", "sed", "cat", "head", "cut", "rm", "mkdir",
        ]
    )
    optional: list[str] = Field(default_factory=lambda: ["tr", "wc"])
    rust: list[str] = Field(default_factory=lambda: ["bash", "id", "tar"])
    rust_updater: str = "rust-stable-install"
    fastfetch_updater: str = "update-fastfetch"


class TesterSettings(BaseModel):
    """Root settings model."""

    endpoints: Endpoints = Field(default_factory=Endpoints)
    timeouts: Timeouts = Field(default_factory=Timeouts)
    tools: ToolLists = Field(default_factory=ToolLists)
