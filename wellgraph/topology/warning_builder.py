"""Source policy warnings and the final warning order."""

from wellgraph.models.warning import ValidationWarning
from wellgraph.topology.warning_catalog import WarningCode, create_validation_warning


def build_source_policy_warnings(
    use_illustrative_fluid_source: bool = False,
    has_visible_fluid_rows: bool = False,
    has_explicit_scenario_rows: bool = False,
) -> list[ValidationWarning]:
    warnings = []
    if use_illustrative_fluid_source and not has_explicit_scenario_rows and has_visible_fluid_rows:
        warnings.append(
            create_validation_warning(
                WarningCode.illustrative_fluid_source_mode_enabled,
                "Illustrative fluid-source mode is enabled. "
                "Use marker/open-hole driven scenarios for engineering decisions.",
            )
        )
    if has_explicit_scenario_rows:
        warnings.append(
            create_validation_warning(
                WarningCode.explicit_scenario_source_mode_active,
                "Explicit scenario source rows are active. "
                "Marker/fluid inferred source fallback is disabled for this topology run.",
            )
        )
    return warnings


def build_topology_validation_warnings(
    vertical: list[ValidationWarning] | None = None,
    radial: list[ValidationWarning] | None = None,
    explicit: list[ValidationWarning] | None = None,
    fluid: list[ValidationWarning] | None = None,
    source_resolution: list[ValidationWarning] | None = None,
    policy: list[ValidationWarning] | None = None,
) -> list[ValidationWarning]:
    """Concatenate warnings in pipeline order: vertical, radial, explicit, fluid, resolution, policy."""
    warnings: list[ValidationWarning] = []
    for group in (vertical, radial, explicit, fluid, source_resolution, policy):
        warnings.extend(group or [])
    return warnings
