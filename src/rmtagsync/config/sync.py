"""Synchronization defaults for the tag reconciliation run."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Final

from rmtagsync.domain.model import DEFAULT_CATCH_ALL_BRANCH, DEFAULT_PRIMARY_BRANCH

from .env import optional_env_var
from .errors import ConfigurationError

PRIMARY_BRANCH_ENV: Final[str] = "RMTAGSYNC_PARENT_TAG"
CATCH_ALL_BRANCH_ENV: Final[str] = "RMTAGSYNC_LOST_FOUND_TAG"


@dataclass(frozen=True, slots=True)
class SyncOptions:
    primary_branch: str = DEFAULT_PRIMARY_BRANCH
    catch_all_branch: str = DEFAULT_CATCH_ALL_BRANCH
    repair_legacy: bool = True
    use_snapshot: bool = True

    def __post_init__(self) -> None:
        if not self.primary_branch.strip() or not self.catch_all_branch.strip():
            raise ConfigurationError("Branch names must not be blank")
        if self.primary_branch == self.catch_all_branch:
            raise ConfigurationError(
                f"Primary and catch-all branch must differ (both are {self.primary_branch!r})"
            )

    def with_overrides(self, **changes: object) -> SyncOptions:
        """Return a copy with every non-``None`` override applied."""

        effective = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **effective)  # pyright: ignore[reportArgumentType]


def get_sync_config() -> SyncOptions:
    return SyncOptions().with_overrides(
        primary_branch=optional_env_var(PRIMARY_BRANCH_ENV),
        catch_all_branch=optional_env_var(CATCH_ALL_BRANCH_ENV),
    )
