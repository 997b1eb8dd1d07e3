"""Messier catalog loading — bundled static reference data."""

from pathlib import Path

import pandas as pd

from messiertonight.models import CelestialObject, ObjectType

_RESOURCES = Path(__file__).parent / "resources"
MESSIER_CSV = _RESOURCES / "messier.csv"


def load_catalog(path: Path = MESSIER_CSV) -> tuple[CelestialObject, ...]:
    """Parse a catalog CSV into CelestialObject records.

    File format: header row, then one object per line with columns
    ``messier_id,name,ra_deg,dec_deg,object_type,magnitude,size_arcmin,constellation``.
    RA and Dec are J2000 degrees; ``object_type`` is an ObjectType value.

    Args:
        path: CSV file to read. Defaults to the bundled Messier table.

    Returns:
        Tuple of CelestialObject in file order.

    Raises:
        ValueError: On an unknown object type, duplicate identifier, or
            out-of-range coordinates.
    """
    df = pd.read_csv(path, dtype={"messier_id": str, "name": str, "constellation": str})
    duplicated = df["messier_id"][df["messier_id"].duplicated()]
    if not duplicated.empty:
        raise ValueError(f"Duplicate catalog identifiers: {', '.join(duplicated)}")

    objects: list[CelestialObject] = []
    for row in df.itertuples(index=False):
        objects.append(
            CelestialObject(
                messier_id=row.messier_id,
                name=row.name,
                ra_deg=float(row.ra_deg),
                dec_deg=float(row.dec_deg),
                object_type=ObjectType(row.object_type),
                magnitude=float(row.magnitude),
                size_arcmin=float(row.size_arcmin),
                constellation=row.constellation,
            )
        )
    return tuple(objects)


def find_object(catalog: tuple[CelestialObject, ...], messier_id: str) -> CelestialObject:
    """Look up a catalog entry by identifier ("M42", case-insensitive)."""
    wanted = messier_id.strip().upper()
    for obj in catalog:
        if obj.messier_id == wanted:
            return obj
    raise KeyError(messier_id)


MESSIER_CATALOG: tuple[CelestialObject, ...] = load_catalog()
