"""
Domain dataclasses used across the application.
"""

import base64
import mimetypes
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dateutil.parser import isoparse

TECHNICIAN = "technician"
DENTIST = "dentist"
ROLES = frozenset({TECHNICIAN, DENTIST})


@dataclass(frozen=True)
class UserIdentity:
    """The authenticated user's name and role."""
    name: str
    role: str                  # "technician" or "dentist"

    @classmethod
    def from_api(cls, payload: Optional[Dict[str, Any]]) -> "UserIdentity":
        if not isinstance(payload, dict):
            raise ValueError("Response carried no user object.")
        role = str(payload.get("role", "")).strip().lower()
        if role not in ROLES:
            raise ValueError(f"Unsupported role '{payload.get('role')}'.")
        return cls(name=str(payload.get("name") or ""), role=role)


def as_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class ScanRecord:
    """Read-only copy of a scan as returned by GET /scans."""
    id: str
    patient_name: str
    patient_id: str
    scan_type: str
    region: str
    upload_date: datetime
    uploaded_by: Optional[str] = None
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "ScanRecord":
        try:
            raw_date = payload["uploadDate"]
            upload_date = raw_date if isinstance(raw_date, datetime) else isoparse(str(raw_date))
            uploaded_by = payload.get("uploadedBy")
            if isinstance(uploaded_by, dict):
                uploaded_by = uploaded_by.get("name")
            return cls(
                id=str(payload["id"]),
                patient_name=str(payload["patientName"]),
                patient_id=str(payload["patientId"]),
                scan_type=str(payload["scanType"]),
                region=str(payload.get("region") or ""),
                upload_date=as_aware(upload_date),
                uploaded_by=str(uploaded_by) if uploaded_by is not None else None,
                image_url=payload.get("imageUrl"),
                thumbnail_url=payload.get("thumbnailUrl"),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed scan record: missing {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "patientName": self.patient_name,
            "patientId": self.patient_id,
            "scanType": self.scan_type,
            "region": self.region,
            "uploadDate": self.upload_date.isoformat(),
            "uploadedBy": self.uploaded_by,
            "imageUrl": self.image_url,
            "thumbnailUrl": self.thumbnail_url,
        }


@dataclass(frozen=True)
class AggregateView:
    """Summary statistics derived from a scan collection. Never stored."""
    total_count: int
    unique_patient_count: int
    current_month_count: int
    recent_five: Tuple[ScanRecord, ...]


@dataclass(frozen=True)
class ScanFile:
    """A candidate scan image selected for upload."""
    filename: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path) -> "ScanFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content_type=content_type or "application/octet-stream",
            data=path.read_bytes(),
        )

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


@dataclass
class UploadDraft:
    """Client-side state between file selection and a successful upload."""
    patient_name: str = ""
    patient_id: str = ""
    scan_type: str = ""
    region: str = ""
    file: Optional[ScanFile] = None
    preview_data_uri: Optional[str] = None


@dataclass(frozen=True)
class LoginResult:
    success: bool
    message: Optional[str] = None


@dataclass(frozen=True)
class UploadResult:
    success: bool
    message: Optional[str] = None
    scan: Optional[Dict[str, Any]] = None
