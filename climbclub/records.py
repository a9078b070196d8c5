"""
Typed records for the three document kinds, and the mapping to and from
the stored field names.

Reading validates required fields and raises RecordError; optional fields
that are missing or blank come back as None.
"""
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from climbclub.store import SERVER_TIMESTAMP, DocumentSnapshot

# Stored field names, in roster/export order
PROFILE_TEXT_FIELDS = (
    ("name", "name"),
    ("emplid", "emplid"),
    ("phone", "phone"),
    ("email", "email"),
    ("citymail", "citymail"),
    ("address", "address"),
    ("emergency_contact", "emergencyContact"),
)

ROSTER_HEADERS = (
    "Name",
    "EMPLID",
    "Phone",
    "Personal Email",
    "Citymail",
    "Address",
    "Emergency Contact",
)


class RecordError(ValueError):
    """A stored document is missing a required field or has the wrong type."""


def _required_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise RecordError(f"missing required field {key!r}")
    return value


def _optional_str(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def _timestamp(data: dict, key: str, required: bool = False) -> Optional[datetime]:
    value = data.get(key)
    if isinstance(value, datetime):
        return value
    if required:
        raise RecordError(f"missing or invalid timestamp {key!r}")
    return None


@dataclass(frozen=True)
class Profile:
    user_id: str
    name: str
    emplid: str
    phone: str
    email: str
    citymail: str
    address: str
    emergency_contact: str
    waiver_checked: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, snap: DocumentSnapshot) -> "Profile":
        data = snap.data
        values = {attr: _required_str(data, key) for attr, key in PROFILE_TEXT_FIELDS}
        return cls(
            user_id=snap.id,
            waiver_checked=bool(data.get("waiverChecked")),
            created_at=_timestamp(data, "createdAt"),
            **values,
        )

    def to_document(self) -> dict:
        doc = {key: getattr(self, attr) for attr, key in PROFILE_TEXT_FIELDS}
        doc["waiverChecked"] = self.waiver_checked
        doc["createdAt"] = self.created_at or SERVER_TIMESTAMP
        return doc


@dataclass(frozen=True)
class Session:
    id: str
    name: str
    session_date: datetime
    description: Optional[str] = None
    location: Optional[str] = None
    price: Optional[str] = None
    waiver_link: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, snap: DocumentSnapshot) -> "Session":
        data = snap.data
        return cls(
            id=snap.id,
            name=_required_str(data, "name"),
            session_date=_timestamp(data, "sessionDate", required=True),
            description=_optional_str(data, "description"),
            location=_optional_str(data, "location"),
            price=_optional_str(data, "price"),
            waiver_link=_optional_str(data, "waiverLink"),
            created_by=_optional_str(data, "createdBy"),
            created_at=_timestamp(data, "createdAt"),
        )

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "sessionDate": self.session_date,
            "description": self.description or "",
            "location": self.location or "",
            "price": self.price or "",
            "waiverLink": self.waiver_link or "",
            "createdBy": self.created_by,
            "createdAt": self.created_at or SERVER_TIMESTAMP,
        }


@dataclass(frozen=True)
class Signup:
    user_id: str
    session_id: str
    profile_name: Optional[str] = None
    profile_emplid: Optional[str] = None
    profile_phone: Optional[str] = None
    profile_email: Optional[str] = None
    profile_citymail: Optional[str] = None
    profile_address: Optional[str] = None
    profile_emergency_contact: Optional[str] = None
    signed_up_at: Optional[datetime] = None
    id: Optional[str] = None

    @classmethod
    def for_profile(cls, profile: Profile, session_id: str) -> "Signup":
        """Copy the profile as it is now; later profile edits don't touch old rosters."""
        return cls(
            user_id=profile.user_id,
            session_id=session_id,
            profile_name=profile.name,
            profile_emplid=profile.emplid,
            profile_phone=profile.phone,
            profile_email=profile.email,
            profile_citymail=profile.citymail,
            profile_address=profile.address,
            profile_emergency_contact=profile.emergency_contact,
        )

    @classmethod
    def from_document(cls, snap: DocumentSnapshot) -> "Signup":
        data = snap.data
        return cls(
            id=snap.id,
            user_id=_required_str(data, "userId"),
            session_id=_required_str(data, "sessionId"),
            profile_name=_optional_str(data, "profileName"),
            profile_emplid=_optional_str(data, "profileEmplid"),
            profile_phone=_optional_str(data, "profilePhone"),
            profile_email=_optional_str(data, "profileEmail"),
            profile_citymail=_optional_str(data, "profileCitymail"),
            profile_address=_optional_str(data, "profileAddress"),
            profile_emergency_contact=_optional_str(data, "profileEmergencyContact"),
            signed_up_at=_timestamp(data, "signedUpAt"),
        )

    def to_document(self) -> dict:
        return {
            "userId": self.user_id,
            "sessionId": self.session_id,
            "profileName": self.profile_name,
            "profileEmplid": self.profile_emplid,
            "profilePhone": self.profile_phone,
            "profileEmail": self.profile_email,
            "profileCitymail": self.profile_citymail,
            "profileAddress": self.profile_address,
            "profileEmergencyContact": self.profile_emergency_contact,
            "signedUpAt": self.signed_up_at or SERVER_TIMESTAMP,
        }

    def roster_row(self) -> tuple:
        values = (
            self.profile_name,
            self.profile_emplid,
            self.profile_phone,
            self.profile_email,
            self.profile_citymail,
            self.profile_address,
            self.profile_emergency_contact,
        )
        return tuple(v or "N/A" for v in values)


def read_records(snapshots, record_cls, label="record"):
    """
    Map snapshots to records, skipping (and logging) documents that fail
    validation instead of failing the whole listing.
    """
    records = []
    for snap in snapshots:
        try:
            records.append(record_cls.from_document(snap))
        except RecordError as e:
            print(f"[RECORDS] Skipping {label} {snap.id}: {e}", file=sys.stderr)
    return records
