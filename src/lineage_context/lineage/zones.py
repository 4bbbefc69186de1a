"""Zone visibility checks."""

from __future__ import annotations

from lineage_context.core.errors import EntityNotVisibleError


class SupportedZoneValidator:
    """Passes entities that belong to at least one allowed zone.

    An empty list of allowed zones means every zone is visible.
    """

    def validate_entity_in_allowed_zone(
        self,
        entity_guid: str,
        zone_membership: list[str],
        allowed_zones: list[str],
    ) -> None:
        if not allowed_zones:
            return
        if any(zone in allowed_zones for zone in zone_membership):
            return
        raise EntityNotVisibleError(
            entity_guid, zone_membership, method="validate_entity_in_allowed_zone"
        )
