"""
Demo Data for the EHR Dashboard

Generates FHIR-shaped demo patients and appointments so the pages have
something to show in offline mode or while the API is unreachable.
"""

import random
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from faker import Faker

from ehr_dashboard.models import Appointment, Patient, appointment_from_resource


class DemoDataGenerator:
    """Generate reproducible demo records for demonstration purposes."""

    def __init__(self, seed: int = 42):
        """Initialize generator with consistent seed for reproducible data."""
        self.random = random.Random(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

        self.conditions = [
            'Hypertension', 'Type 2 diabetes', 'Asthma', 'Hyperlipidemia',
            'Hypothyroidism', 'Migraine', 'GERD', 'Osteoarthritis'
        ]
        self.allergies = ['Penicillin', 'Peanuts', 'Latex', 'Sulfa drugs', 'Shellfish', 'Pollen']
        self.providers = [
            ('PRAC001', 'Dr. Sarah Wilson', 'Primary Care'),
            ('PRAC002', 'Dr. James Carter', 'Cardiology'),
            ('PRAC003', 'Dr. Priya Natarajan', 'Endocrinology'),
            ('PRAC004', 'Dr. Miguel Alvarez', 'Dermatology'),
        ]
        self.visit_reasons = [
            'Annual checkup', 'Follow-up visit', 'Consultation',
            'Medication review', 'Lab results review', 'Vaccination'
        ]

    def patient_resource(self, index: int) -> Dict[str, Any]:
        gender = self.random.choice(['male', 'female'])
        first = self.fake.first_name_male() if gender == 'male' else self.fake.first_name_female()
        birth_date = self.fake.date_of_birth(minimum_age=1, maximum_age=90)

        return {
            'resourceType': 'Patient',
            'id': f"PAT{index:03d}",
            'active': self.random.random() > 0.1,
            'name': [{'use': 'official', 'family': self.fake.last_name(), 'given': [first]}],
            'telecom': [
                {'system': 'phone', 'value': self.fake.numerify('###-###-####'), 'use': 'mobile'},
                {'system': 'email', 'value': self.fake.email()},
            ],
            'gender': gender,
            'birthDate': birth_date.isoformat(),
            'address': [{
                'use': 'home',
                'line': [self.fake.street_address()],
                'city': self.fake.city(),
                'state': self.fake.state_abbr(),
                'postalCode': self.fake.postcode(),
                'country': 'US',
            }],
            'identifier': [{
                'system': 'http://hospital.example.org/mrn',
                'value': self.fake.numerify('MRN########'),
                'type': {'text': 'MRN'},
            }],
            'medicalHistory': self.random.sample(self.conditions, k=self.random.randint(0, 3)),
            'allergies': self.random.sample(self.allergies, k=self.random.randint(0, 2)),
        }

    def patients(self, count: int = 12) -> List[Patient]:
        return [Patient.model_validate(self.patient_resource(i + 1)) for i in range(count)]

    def appointment_resource(self, index: int, patient: Patient, start: datetime,
                             today: Optional[date] = None) -> Dict[str, Any]:
        provider_id, provider_name, specialty = self.random.choice(self.providers)
        duration = self.random.choice([15, 30, 45, 60])
        if start.date() < (today or date.today()):
            status = self.random.choice(['fulfilled', 'fulfilled', 'noshow', 'cancelled'])
        else:
            status = self.random.choice(['booked', 'booked', 'pending', 'proposed'])

        return {
            'resourceType': 'Appointment',
            'id': f"APT{index:03d}",
            'status': status,
            'start': start.isoformat(),
            'end': (start + timedelta(minutes=duration)).isoformat(),
            'minutesDuration': duration,
            'description': self.random.choice(self.visit_reasons),
            'patient': {
                'id': patient.id,
                'name': patient.display_name,
                'gender': patient.gender,
                'medicalHistory': patient.medical_history,
                'allergies': patient.allergies,
            },
            'provider': {'id': provider_id, 'name': provider_name, 'specialty': specialty},
        }

    def appointments(self, patients: List[Patient], count: int = 15,
                     today: Optional[date] = None) -> List[Appointment]:
        """Appointments spread from two days ago to four days ahead, on the half hour."""
        today = today or date.today()
        result = []
        for i in range(count):
            day = today + timedelta(days=self.random.randint(-2, 4))
            slot = time(hour=self.random.randint(8, 16), minute=self.random.choice([0, 30]))
            resource = self.appointment_resource(
                i + 1, self.random.choice(patients), datetime.combine(day, slot), today
            )
            result.append(appointment_from_resource(resource))
        return result


def demo_dataset(seed: int = 42) -> Dict[str, list]:
    generator = DemoDataGenerator(seed)
    patients = generator.patients()
    return {'patients': patients, 'appointments': generator.appointments(patients)}
