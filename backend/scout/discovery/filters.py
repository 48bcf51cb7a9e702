"""Translate user criteria into matchmaking lobby list predicates."""

from scout.discovery.models import FilterCriteria, LobbyListFilter, StringFilter

# Checksum advertised by lobbies running the unmodified game.
BASE_VERSION_CHECKSUM = "0143"

# Value of the `password` lobby key for lobbies without a password.
NO_PASSWORD = "0"


def build_lobby_filter(
    criteria: FilterCriteria,
    *,
    base_version_checksum: str = BASE_VERSION_CHECKSUM,
) -> LobbyListFilter:
    """Build include predicates for name, password and version, in that order."""
    strings: list[StringFilter] = []

    if criteria.name_pattern:
        strings.append(StringFilter(key="name", value=criteria.name_pattern))

    if criteria.require_no_password:
        strings.append(StringFilter(key="password", value=NO_PASSWORD))

    if criteria.require_base_version:
        strings.append(StringFilter(key="version", value=base_version_checksum))

    return LobbyListFilter(strings=tuple(strings))
