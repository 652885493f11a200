"""
FHIR-shaped records used by the dashboard.

Incoming JSON is parsed into these models at the API boundary; pages only
ever see the canonical shapes defined here.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Gender = Literal['male', 'female', 'other', 'unknown']
AppointmentStatus = Literal['proposed', 'pending', 'booked', 'arrived', 'fulfilled', 'cancelled', 'noshow']

UNKNOWN_PATIENT = "Unknown Patient"
DEFAULT_APPOINTMENT_MINUTES = 30
SUBJECT_PARTICIPANT_CODE = "PART"


class FhirModel(BaseModel):
    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class HumanName(FhirModel):
    use: Optional[str] = None
    family: str = ""
    given: List[str] = Field(default_factory=list)
    prefix: List[str] = Field(default_factory=list)
    suffix: List[str] = Field(default_factory=list)


class ContactPoint(FhirModel):
    system: Optional[str] = None  # phone | email | fax
    value: str = ""
    use: Optional[str] = None


class Address(FhirModel):
    use: Optional[str] = None
    line: List[str] = Field(default_factory=list)
    city: str = ""
    state: str = ""
    postal_code: str = Field("", alias="postalCode")
    country: Optional[str] = None


class IdentifierType(FhirModel):
    text: Optional[str] = None


class Identifier(FhirModel):
    use: Optional[str] = None
    system: Optional[str] = None
    value: str = ""
    type: Optional[IdentifierType] = None

    @property
    def is_mrn(self) -> bool:
        type_text = self.type.text if self.type else None
        return "mrn" in (self.system or "").lower() or "mrn" in (type_text or "").lower()


class Patient(FhirModel):
    resource_type: Literal['Patient'] = Field('Patient', alias="resourceType")
    id: Optional[str] = None
    active: Optional[bool] = None
    name: List[HumanName] = Field(default_factory=list)
    telecom: List[ContactPoint] = Field(default_factory=list)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = Field(None, alias="birthDate")
    address: List[Address] = Field(default_factory=list)
    identifier: List[Identifier] = Field(default_factory=list)
    medical_history: List[str] = Field(default_factory=list, alias="medicalHistory")
    allergies: List[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        """Given names and family name of the first name entry, or 'Unknown'."""
        if not self.name:
            return "Unknown"
        first = self.name[0]
        return " ".join([*first.given, first.family]).strip() or "Unknown"

    @property
    def preferred_identifier(self) -> Optional[str]:
        """The MRN when one is flagged, else the first identifier value."""
        if not self.identifier:
            return None
        preferred = next((i for i in self.identifier if i.is_mrn), self.identifier[0])
        return preferred.value

    def _telecom_value(self, system: str) -> Optional[str]:
        return next((t.value for t in self.telecom if t.system == system), None)

    @property
    def phone(self) -> Optional[str]:
        return self._telecom_value("phone")

    @property
    def email(self) -> Optional[str]:
        return self._telecom_value("email")

    @property
    def formatted_address(self) -> str:
        if not self.address:
            return "No address on file"
        addr = self.address[0]
        locality = " ".join(part for part in (addr.state, addr.postal_code) if part)
        parts = [", ".join(addr.line), addr.city, locality]
        return ", ".join(part for part in parts if part) or "No address on file"


class Appointment(FhirModel):
    """Canonical scheduled encounter, whatever shape the feed delivered."""
    id: str
    status: AppointmentStatus
    start: datetime
    end: datetime  # assumed >= start, not checked
    minutes_duration: int = DEFAULT_APPOINTMENT_MINUTES
    description: Optional[str] = None
    patient_id: Optional[str] = None
    patient_name: str = UNKNOWN_PATIENT
    patient_gender: Optional[str] = None
    medical_history: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    provider_name: Optional[str] = None
    provider_specialty: Optional[str] = None


class BundleEntry(FhirModel):
    full_url: Optional[str] = Field(None, alias="fullUrl")
    resource: Dict[str, Any] = Field(default_factory=dict)


class Bundle(FhirModel):
    resource_type: Literal['Bundle'] = Field('Bundle', alias="resourceType")
    type: str = "searchset"  # searchset | collection
    total: Optional[int] = None
    entry: List[BundleEntry] = Field(default_factory=list)

    def resources(self) -> List[Dict[str, Any]]:
        return [e.resource for e in self.entry]


def _subject_participant(participants: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    for participant in participants:
        for concept in participant.get("type") or []:
            if any(c.get("code") == SUBJECT_PARTICIPANT_CODE for c in concept.get("coding") or []):
                return participant
    # some feeds leave the type off; fall back to the patient actor
    for participant in participants:
        if (participant.get("actor") or {}).get("reference", "").startswith("Patient/"):
            return participant
    return None


def appointment_from_resource(resource: Dict[str, Any]) -> Appointment:
    """
    Build the canonical Appointment from either appointment shape.

    The mock feed flattens the patient into ``patient: {id, name, ...}`` and
    the provider into ``provider: {...}``; FHIR servers put both in the
    ``participant`` list, with the subject tagged by the PART code.
    """
    fields: Dict[str, Any] = {
        "id": resource.get("id"),
        "status": resource.get("status"),
        "start": resource.get("start"),
        "end": resource.get("end"),
        "description": resource.get("description") or resource.get("comment"),
    }
    if resource.get("minutesDuration") is not None:
        fields["minutes_duration"] = resource["minutesDuration"]

    patient = resource.get("patient")
    if isinstance(patient, dict):
        fields.update(
            patient_id=patient.get("id"),
            patient_name=patient.get("name") or UNKNOWN_PATIENT,
            patient_gender=patient.get("gender"),
            medical_history=patient.get("medicalHistory") or [],
            allergies=patient.get("allergies") or [],
        )
        provider = resource.get("provider") or {}
        fields.update(provider_name=provider.get("name"), provider_specialty=provider.get("specialty"))
    else:
        subject = _subject_participant(resource.get("participant") or [])
        actor = (subject or {}).get("actor") or {}
        reference = actor.get("reference") or ""
        fields.update(
            patient_id=reference.split("/", 1)[1] if reference.startswith("Patient/") else None,
            patient_name=actor.get("display") or UNKNOWN_PATIENT,
        )
        for participant in resource.get("participant") or []:
            practitioner = participant.get("actor") or {}
            if practitioner.get("reference", "").startswith("Practitioner/"):
                fields["provider_name"] = practitioner.get("display")
                break

    return Appointment.model_validate(fields)
