"""Shared request helpers for API tests."""

from sismonev.core.models import User
from sismonev.core.security import create_access_token

PASSWORD = "secret123"


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, extra={"role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


def report_payload(organization_id: str | None = "KEMENKES", target=34, actual=30, **overrides) -> dict:
    payload = {
        "organization_id": organization_id,
        "program": "Layanan PAUD HI terpadu",
        "indicators": [
            {
                "name": "Persentase anak usia dini yang mendapat layanan",
                "target_unit": "Persen",
                "resource_count": 2,
                "year_records": [{"year": 2024, "target": target, "actual": actual}],
            }
        ],
    }
    payload.update(overrides)
    return payload
