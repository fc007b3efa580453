"""Size Units

Length values tagged with a measurement unit, physical page sizes and page
orientation used by the query model:

- Length: a magnitude in millimeters, inches or points
- PageSize: closed enumeration of ISO A/B and US Letter paper sizes
- Orientation: portrait (default) or landscape
- LengthFlag: command-line friendly wrapper around an optional Length

Conversion factors come from ReportLab's unit constants, so a point is
exactly 1/72 inch and an inch is exactly 25.4 millimeters.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from reportlab.lib.units import inch as POINTS_PER_INCH
from reportlab.lib.units import mm as POINTS_PER_MM

from .exceptions import InvalidFormatError, UnknownPageSizeError

MM_PER_INCH = POINTS_PER_INCH / POINTS_PER_MM


class Unit(Enum):
    """Measurement unit with its textual suffix."""

    MILLIMETER = "mm"
    INCH = "in"
    POINT = "pt"

    @property
    def suffix(self) -> str:
        return self.value


# Size of one unit expressed in points
_POINTS_PER_UNIT = {
    Unit.MILLIMETER: POINTS_PER_MM,
    Unit.INCH: POINTS_PER_INCH,
    Unit.POINT: 1.0,
}


@dataclass(frozen=True)
class Length:
    """A measurement value tagged with its unit.

    A Length never rejects its value: negative lengths are representable and
    only rejected when a query is validated.

    Examples:
        >>> str(Length.mm(210))
        '210.0mm'
        >>> Length.inch(1).points()
        Length(value=72.0, unit=<Unit.POINT: 'pt'>)
    """

    value: float
    unit: Unit = Unit.MILLIMETER

    @classmethod
    def mm(cls, value: float) -> "Length":
        return cls(float(value), Unit.MILLIMETER)

    @classmethod
    def inch(cls, value: float) -> "Length":
        return cls(float(value), Unit.INCH)

    @classmethod
    def pt(cls, value: float) -> "Length":
        return cls(float(value), Unit.POINT)

    def to(self, unit: Unit) -> "Length":
        """Convert the length into the given unit."""
        if unit is self.unit:
            return self
        points = self.value * _POINTS_PER_UNIT[self.unit]
        return Length(points / _POINTS_PER_UNIT[unit], unit)

    def millimeters(self) -> "Length":
        return self.to(Unit.MILLIMETER)

    def inches(self) -> "Length":
        return self.to(Unit.INCH)

    def points(self) -> "Length":
        return self.to(Unit.POINT)

    def __float__(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"{self.value:.1f}{self.unit.suffix}"

    def to_wire(self) -> str:
        """Canonical serialized form sent in the JSON request body."""
        return f"{self.value:.0f}{self.unit.suffix}"

    @classmethod
    def parse(cls, text: str) -> "Length":
        """
        Parse a suffixed length literal.

        Args:
            text: Literal such as "10mm", "8.5in" or "12 pt"

        Returns:
            Length in the unit named by the suffix

        Raises:
            InvalidFormatError: If the suffix is unknown or the number does not parse
        """
        stripped = text.strip()
        for unit in Unit:
            if stripped.endswith(unit.suffix):
                number = stripped[:-len(unit.suffix)].strip()
                try:
                    return cls(float(number), unit)
                except ValueError:
                    raise InvalidFormatError(text, f"invalid {unit.name.lower()} value")
        raise InvalidFormatError(text)

    @classmethod
    def parse_inches(cls, text: str) -> "Length":
        """Parse a millimeter or inch literal and return it in inches."""
        length = cls.parse(text)
        if length.unit is Unit.POINT:
            raise InvalidFormatError(text, "invalid inch input")
        return length.inches()


class Orientation(Enum):
    """Page orientation; portrait is the default."""

    PORTRAIT = False
    LANDSCAPE = True

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, text: str) -> "Orientation":
        try:
            return cls[text.strip().upper()]
        except KeyError:
            raise ValueError(f"invalid orientation: '{text}'")


class PageSize(Enum):
    """Enumeration of physical paper sizes.

    The value is the display name, which is also the wire representation.
    """

    UNDEFINED = "Undefined"
    A0 = "A0"
    A1 = "A1"
    A2 = "A2"
    A3 = "A3"
    A4 = "A4"
    A5 = "A5"
    A6 = "A6"
    A7 = "A7"
    A8 = "A8"
    A9 = "A9"
    A10 = "A10"
    B0 = "B0"
    B1 = "B1"
    B2 = "B2"
    B3 = "B3"
    B4 = "B4"
    B5 = "B5"
    B6 = "B6"
    B7 = "B7"
    B8 = "B8"
    B9 = "B9"
    B10 = "B10"
    LETTER = "Letter"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def values(cls) -> List["PageSize"]:
        return list(cls)

    @classmethod
    def from_name(cls, name: str) -> "PageSize":
        """
        Look up a page size by its display name.

        Raises:
            UnknownPageSizeError: If the name is not an enumerated size
        """
        try:
            return cls(name)
        except ValueError:
            raise UnknownPageSizeError(name)

    @classmethod
    def is_valid(cls, value) -> bool:
        return isinstance(value, cls)

    def dimensions(self) -> Tuple[Length, Length]:
        """
        Physical (width, height) in millimeters, portrait as authored.

        Orientation is not applied here. UNDEFINED returns zero lengths.
        """
        width, height = _PAGE_DIMENSIONS_MM.get(self, (0.0, 0.0))
        return Length.mm(width), Length.mm(height)


_PAGE_DIMENSIONS_MM = {
    PageSize.A0: (841, 1189),
    PageSize.A1: (594, 841),
    PageSize.A2: (420, 594),
    PageSize.A3: (297, 420),
    PageSize.A4: (210, 297),
    PageSize.A5: (148, 210),
    PageSize.A6: (105, 148),
    PageSize.A7: (74, 105),
    PageSize.A8: (52, 74),
    PageSize.A9: (37, 52),
    PageSize.A10: (26, 37),
    PageSize.B0: (1000, 1414),
    PageSize.B1: (707, 1000),
    PageSize.B2: (500, 707),
    PageSize.B3: (353, 500),
    PageSize.B4: (250, 353),
    PageSize.B5: (176, 250),
    PageSize.B6: (125, 176),
    PageSize.B7: (88, 125),
    PageSize.B8: (66, 88),
    PageSize.B9: (44, 62),
    PageSize.B10: (31, 44),
    PageSize.LETTER: (215.9, 279.4),
}


class LengthFlag:
    """Settable wrapper around an optional Length for command-line options.

    The literal "undefined" clears the value so the server default applies.
    """

    UNDEFINED = "undefined"

    def __init__(self, length: Optional[Length] = None):
        self.length = length

    @classmethod
    def from_string(cls, text: str) -> "LengthFlag":
        flag = cls()
        flag.set(text)
        return flag

    def set(self, text: str) -> None:
        if text == self.UNDEFINED:
            self.length = None
            return
        self.length = Length.parse(text)

    def type(self) -> str:
        return "unit"

    def __str__(self) -> str:
        if self.length is None:
            return self.UNDEFINED
        return str(self.length)

    def __repr__(self) -> str:
        return f"LengthFlag({self.length!r})"
