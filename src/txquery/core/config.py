from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

MissingLogPolicy = Literal["fail", "skip"]


@dataclass(frozen=True)
class QueryConfig:
    """Behaviour switches for the query builder."""

    # pick overloads by the call data selector and fail when none matches
    verify_selector: bool = True
    # "fail" raises NoMatchingLogError, "skip" emits an empty field group
    missing_log_policy: MissingLogPolicy = "fail"
    # logs whose emitter has no discoverable ABI cannot match and are passed over
    skip_unknown_emitters: bool = True

    def __post_init__(self) -> None:
        if self.missing_log_policy not in ("fail", "skip"):
            raise ValueError(f"unknown missing_log_policy: {self.missing_log_policy!r}")


@dataclass(frozen=True)
class FetchConfig:
    """Configuration for fetching a transaction and its ABIs (CLI)."""

    rpc_url: str
    tx_hash: str
    timeout_s: int = 20
    explorer_url: str | None = None
    explorer_api_key: str | None = None
