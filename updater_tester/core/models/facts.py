"""
Fact models — structured values pulled out of unstructured upstream text.

A Fact is never ``None``: an absent fact has an empty value and an empty
source. ExtractionRecord keeps facts in first-match-wins order, so a
lower-priority recognizer can never overwrite a higher-priority one.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Fact(BaseModel):
    """A named string value with the rule that produced it."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str = ""
    source: str = ""   # recognizer rule that matched, "" when absent

    @property
    def present(self) -> bool:
        return bool(self.value)

    @classmethod
    def absent(cls, name: str) -> Fact:
        return cls(name=name)


class ExtractionRecord(BaseModel):
    """Ordered fact set obtained from one upstream text blob."""

    facts: dict[str, Fact] = Field(default_factory=dict)

    def offer(self, name: str, value: str, source: str) -> bool:
        """Store ``value`` unless ``name`` is already filled.

        Returns:
            True if the value was accepted.
        """
        if not value or self.has(name):
            return False
        self.facts[name] = Fact(name=name, value=value, source=source)
        return True

    def has(self, name: str) -> bool:
        fact = self.facts.get(name)
        return fact is not None and fact.present

    def get(self, name: str) -> Fact:
        return self.facts.get(name) or Fact.absent(name)

    def value(self, name: str) -> str:
        return self.get(name).value

    def to_dict(self) -> dict:
        return {
            name: {"value": f.value, "source": f.source}
            for name, f in self.facts.items()
        }


class AssetFormat(StrEnum):
    """Container format declared by an asset URL suffix."""

    XZ = "xz"
    GZ = "gz"
    DEB = "deb"
    UNKNOWN = "unknown"


def detect_format(url: str) -> AssetFormat:
    """Map a download URL to its declared container format.

    Tarball suffixes match anywhere in the URL (query strings survive),
    ``.deb`` only at the end.
    """
    if ".tar.xz" in url:
        return AssetFormat.XZ
    if ".tar.gz" in url:
        return AssetFormat.GZ
    if url.endswith(".deb"):
        return AssetFormat.DEB
    return AssetFormat.UNKNOWN


class AssetDescriptor(BaseModel):
    """A resolved download target plus what we expect to find there."""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    expected_hash: str = ""
    format: AssetFormat = AssetFormat.UNKNOWN

    @classmethod
    def from_facts(
        cls,
        url: Fact,
        digest: Fact | None = None,
    ) -> AssetDescriptor:
        """Merge a URL fact and an optional digest fact."""
        return cls(
            url=url.value,
            expected_hash=digest.value if digest else "",
            format=detect_format(url.value) if url.present else AssetFormat.UNKNOWN,
        )

    @property
    def verifiable(self) -> bool:
        """Whether a signature check is meaningful for this asset."""
        return bool(self.url) and self.format is not AssetFormat.UNKNOWN
