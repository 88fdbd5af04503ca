"""Validation of the ``type`` attribute of openHAB items.

Available item types (see https://www.openhab.org/docs/concepts/items.html):

    Color          Color information (RGB)
    Contact        Status of contacts, e.g. door/window contacts
    DateTime       Stores date and time
    Dimmer         Percentage value for dimmers
    Group          Item to nest other items / collect them in groups
    Image          Binary data of an image
    Location       GPS coordinates
    Number         Values in number format, optionally with a dimension (``Number:Temperature``)
    Player         Allows control of players (e.g. audio players)
    Rollershutter  Roller shutter item, typically used for blinds
    String         Stores texts
    Switch         Switch item, used for anything that needs to be switched ON and OFF
"""

from __future__ import annotations

from typing import FrozenSet, Optional

from openhab_provider.core.diagnostics import Diagnostic, Diagnostics
from openhab_provider.core.logger import get_logger
from openhab_provider.core.values import StringValue

logger = get_logger(__name__)

BASE_TYPES: FrozenSet[str] = frozenset(
    {
        "Color",
        "Contact",
        "DateTime",
        "Dimmer",
        "Group",
        "Image",
        "Location",
        "Number",
        "Player",
        "Rollershutter",
        "String",
        "Switch",
    }
)

# see https://www.openhab.org/docs/concepts/units-of-measurement.html#list-of-units
IMPERIAL_UNITS: FrozenSet[str] = frozenset(
    {
        "Pressure",
        "Temperature",
        "Speed",
        "Length",
    }
)

# see https://www.openhab.org/docs/concepts/units-of-measurement.html#list-of-units
SI_UNITS: FrozenSet[str] = frozenset(
    {
        "Acceleration",
        "AmountOfSubstance",
        "Angle",
        "Area",
        "ArealDensity",
        "CatalyticActivity",
        "DataAmount",
        "DataTransferRate",
        "Density",
        "Dimensionless",
        "ElectricPotential",
        "ElectricCapacitance",
        "ElectricCharge",
        "ElectricConductance",
        "ElectricConductivity",
        "ElectricCurrent",
        "ElectricInductance",
        "ElectricResistance",
        "Energy",
        "Force",
        "Frequency",
        "Illuminance",
        "Intensity",
        "Length",
        "LuminousFlux",
        "LuminousIntensity",
        "MagneticFlux",
        "MagneticFluxDensity",
        "Mass",
        "Power",
        "Pressure",
        "Radioactivity",
        "RadiationDoseAbsorbed",
        "RadiationDoseEffective",
        "SolidAngle",
        "Speed",
        "Temperature",
        "Time",
        "Volume",
        "VolumetricFlowRate",
    }
)

DIMENSIONS: FrozenSet[str] = SI_UNITS | IMPERIAL_UNITS


def check_item_type(full_value: str, path: str = "type") -> Optional[Diagnostic]:
    """Classify an item type string.

    Returns ``None`` when the type is acceptable, otherwise a single error
    diagnostic attributed to ``path``. Only the first two ``:`` separated
    segments are looked at; anything after the dimension is ignored.
    """
    parts = full_value.split(":")
    base_type = parts[0]

    if base_type not in BASE_TYPES:
        return Diagnostic("error", "Unknown type", f"Given type '{full_value}' is unknown.", attribute_path=path)

    if len(parts) > 1:
        dimension = parts[1]
        if base_type != "Number":
            # openHAB only knows dimensions on Number items; left to the server to reject.
            logger.debug(f"Dimension '{dimension}' on non-Number type '{base_type}' is not validated")
            return None
        if dimension not in DIMENSIONS:
            return Diagnostic(
                "error",
                "Unknown dimension used for Number type",
                f"Given dimension '{dimension}' is unknown.",
                attribute_path=path,
            )

    return None


class ItemTypeValidator:
    """Attribute validator ensuring an item ``type`` is a known base type (and dimension)."""

    def description(self) -> str:
        return "Ensures a given type is valid."

    def markdown_description(self) -> str:
        return self.description()

    def validate(self, value: StringValue, path: str, diagnostics: Diagnostics) -> None:
        # Nothing to check until the value is known; required-ness is a schema concern.
        if not value.is_present:
            return

        diagnostic = check_item_type(value.value, path)
        if diagnostic is not None:
            diagnostics.append(diagnostic)
