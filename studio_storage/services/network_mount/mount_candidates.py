"""Candidate generation for the auto-mount search."""

from dataclasses import dataclass, field
from typing import Callable, List, TYPE_CHECKING

if TYPE_CHECKING:
    from ..config_store import NasConfig


@dataclass(frozen=True)
class MountCandidate:
    mount_point: str
    share_path: str
    user: str = ""
    password: str = field(default="", repr=False)

    def describe(self) -> str:
        return f"{self.share_path} ({self.user or 'anonymous'}) -> {self.mount_point}"


def candidate_users(config: "NasConfig") -> List[str]:
    """Configured user first, then alternatives, guest and anonymous; no duplicates."""
    users = []
    ordered = [config.nas_user] if config.nas_user else []
    ordered += list(config.alternative_users) + ["guest", ""]
    for user in ordered:
        if user not in users:
            users.append(user)
    return users


def build_mount_candidates(
    config: "NasConfig",
    mount_points: List[str],
    share_path_builder: Callable[["NasConfig", str], str],
) -> List[MountCandidate]:
    """
    Ordered (mount point x user) combinations to try.

    Mount points vary slowest, so every credential is tried against the first
    mount point before moving on. Only the configured user carries the
    configured password.
    """
    candidates = []
    for mount_point in mount_points:
        for user in candidate_users(config):
            password = config.nas_password if user and user == config.nas_user else ""
            candidates.append(
                MountCandidate(
                    mount_point=mount_point,
                    share_path=share_path_builder(config, user),
                    user=user,
                    password=password,
                )
            )
    return candidates
