"""Decide which lobbies of a new snapshot are worth reporting."""

from enum import StrEnum

from scout.discovery.models import Snapshot


class DiffPolicy(StrEnum):
    # An entry is reported unless its name equals the name of every previous
    # entry. With two or more differently named previous entries nearly
    # everything is reported again.
    LITERAL = "literal"
    # An entry is reported when its name is absent from the previous snapshot.
    MEMBERSHIP = "membership"


def diff_snapshots(
    previous: Snapshot | None,
    current: Snapshot,
    policy: DiffPolicy = DiffPolicy.LITERAL,
) -> Snapshot:
    """Return the entries of `current` to report, in their original order.

    Without a previous snapshot (first cycle) everything is reported.
    """
    if not previous:
        return current

    if policy is DiffPolicy.MEMBERSHIP:
        previous_names = {lobby.name for lobby in previous}
        return tuple(lobby for lobby in current if lobby.name not in previous_names)

    return tuple(lobby for lobby in current if any(old.name != lobby.name for old in previous))
