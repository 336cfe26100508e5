"""Fixed catalog of participating ministries/agencies (K/L)."""

from sismonev.core.errors import ValidationError

ORGANIZATIONS: dict[str, str] = {
    "KEMENKO_PMK": "Kementerian Koordinator Bidang Pembangunan Manusia dan Kebudayaan",
    "KEMENDIKBUDRISTEK": "Kementerian Pendidikan, Kebudayaan, Riset, dan Teknologi",
    "KEMENAG": "Kementerian Agama",
    "KEMENDES_PDTT": "Kementerian Desa, Pembangunan Daerah Tertinggal, dan Transmigrasi",
    "KEMENKES": "Kementerian Kesehatan",
    "KEMENDUKBANGGA": "Kementerian Pembangunan Kependudukan dan Keluarga Berencana Nasional",
    "KEMENSOS": "Kementerian Sosial",
    "KEMENPPPA": "Kementerian Pemberdayaan Perempuan dan Perlindungan Anak",
    "KEMENDAGRI": "Kementerian Dalam Negeri",
    "BAPPENAS": "Badan Perencanaan Pembangunan Nasional",
    "BPS": "Badan Pusat Statistik",
}


def list_organizations() -> list[dict[str, str]]:
    """Return the catalog as [{id, name}] in declaration order."""
    return [{"id": code, "name": name} for code, name in ORGANIZATIONS.items()]


def is_known_organization(code: str | None) -> bool:
    return code is not None and code in ORGANIZATIONS


def organization_name(code: str) -> str:
    """Display name for a catalog code. Raises ValidationError for unknown codes."""
    try:
        return ORGANIZATIONS[code]
    except KeyError:
        raise ValidationError(f"Unknown organization: {code}") from None


def resolve_organization(code: str, name: str | None = None) -> tuple[str, str]:
    """Validate code and return (code, name); name falls back to the catalog name."""
    catalog_name = organization_name(code)
    return code, (name.strip() if name and name.strip() else catalog_name)
