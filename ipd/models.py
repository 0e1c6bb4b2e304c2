"""
Database models for the inpatient (IPD) backend.

These models capture the concepts needed to admit a patient into a
ward bed, discharge them again and price the stay: users with a
clinical role, patients, wards, beds, admissions and the singleton
hospital configuration.  Field names follow the JSON contract of the
front-end (camelCase is produced by the services, not stored here).
"""
from __future__ import annotations

from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator
from django.db import models


class User(AbstractUser):
    """Staff account with a single clinical/administrative role.

    The role drives every permission check in the API; see
    :mod:`ipd.permissions`.
    """
    ROLE_ADMIN = 'ADMIN'
    ROLE_DOCTOR = 'DOCTOR'
    ROLE_WARD_MANAGER = 'WARD_MANAGER'
    ROLE_NURSE = 'NURSE'
    ROLE_NURSING_SUPERVISOR = 'NURSING_SUPERVISOR'
    ROLE_RECEPTIONIST = 'RECEPTIONIST'
    ROLE_LAB_TECH = 'LAB_TECH'
    ROLE_PHARMACY = 'PHARMACY'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_WARD_MANAGER, 'Ward Manager'),
        (ROLE_NURSE, 'Nurse'),
        (ROLE_NURSING_SUPERVISOR, 'Nursing Supervisor'),
        (ROLE_RECEPTIONIST, 'Receptionist'),
        (ROLE_LAB_TECH, 'Lab Technician'),
        (ROLE_PHARMACY, 'Pharmacy'),
    ]
    role = models.CharField(max_length=32, choices=ROLE_CHOICES, default=ROLE_RECEPTIONIST, db_index=True)
    full_name = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(models.Model):
    """Demographic record of a patient; only what the IPD screens need."""
    TYPE_OUTPATIENT = 'OUTPATIENT'
    TYPE_INPATIENT = 'INPATIENT'
    TYPE_CHOICES = ((TYPE_OUTPATIENT, 'Outpatient'), (TYPE_INPATIENT, 'Inpatient'))

    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=16, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    patient_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_OUTPATIENT)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} (#{self.id})"


class Ward(models.Model):
    """A physical care unit.

    ``type`` is the ward category used to pick a default daily rate
    from the hospital configuration.  ``daily_rate`` is an optional
    per-ward override; when it is set (zero included) it wins over any
    category default.
    """
    TYPE_GENERAL = 'GENERAL'
    TYPE_SEMI_PRIVATE = 'SEMI_PRIVATE'
    TYPE_PRIVATE = 'PRIVATE'
    TYPE_ICU = 'ICU'
    TYPE_CHOICES = [
        (TYPE_GENERAL, 'General'),
        (TYPE_SEMI_PRIVATE, 'Semi-private'),
        (TYPE_PRIVATE, 'Private'),
        (TYPE_ICU, 'ICU'),
        ('EMERGENCY', 'Emergency'),
        ('PEDIATRIC', 'Pediatric'),
        ('MATERNITY', 'Maternity'),
        ('SURGICAL', 'Surgical'),
        ('CARDIAC', 'Cardiac'),
        ('NEUROLOGY', 'Neurology'),
        ('ORTHOPEDIC', 'Orthopedic'),
    ]

    name = models.CharField(max_length=100, unique=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_GENERAL, db_index=True)
    capacity = models.PositiveIntegerField(default=0)
    current_occupancy = models.PositiveIntegerField(default=0)
    daily_rate = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Overrides the category tariff when set",
    )
    floor = models.CharField(max_length=50, blank=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"


class Bed(models.Model):
    TYPE_GENERAL = 'GENERAL'
    TYPE_ICU = 'ICU'
    TYPE_PRIVATE = 'PRIVATE'
    TYPE_CHOICES = ((TYPE_GENERAL, 'General'), (TYPE_ICU, 'ICU'), (TYPE_PRIVATE, 'Private'))

    ward = models.ForeignKey(Ward, on_delete=models.CASCADE, related_name='beds')
    bed_number = models.CharField(max_length=20)
    bed_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_GENERAL)
    is_occupied = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('ward', 'bed_number')]
        indexes = [
            models.Index(fields=['ward', 'is_occupied'], name='ipd_bed_ward_occupied_idx'),
        ]

    def __str__(self) -> str:
        return f"Bed {self.bed_number} in {self.ward_id}"


class Admission(models.Model):
    """One inpatient stay, from admission to discharge.

    ``discharge_date`` is only set when the status flips to
    ``DISCHARGED`` and is never earlier than ``admission_date``.
    Admissions are not deleted in the normal flow.
    """
    STATUS_ADMITTED = 'ADMITTED'
    STATUS_DISCHARGED = 'DISCHARGED'
    STATUS_CHOICES = ((STATUS_ADMITTED, 'Admitted'), (STATUS_DISCHARGED, 'Discharged'))

    TYPE_EMERGENCY = 'EMERGENCY'
    TYPE_PLANNED = 'PLANNED'
    TYPE_TRANSFER = 'TRANSFER'
    TYPE_DAY_CARE = 'DAY_CARE'
    TYPE_CHOICES = (
        (TYPE_EMERGENCY, 'Emergency'),
        (TYPE_PLANNED, 'Planned'),
        (TYPE_TRANSFER, 'Transfer'),
        (TYPE_DAY_CARE, 'Day care'),
    )

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='admissions')
    ward = models.ForeignKey(Ward, on_delete=models.PROTECT, related_name='admissions')
    bed = models.ForeignKey(Bed, on_delete=models.PROTECT, related_name='admissions')
    admission_date = models.DateTimeField()
    admission_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_EMERGENCY)
    admission_reason = models.CharField(max_length=500)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ADMITTED, db_index=True)
    admitted_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='admissions_admitted'
    )
    discharge_date = models.DateTimeField(null=True, blank=True)
    discharged_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='admissions_discharged'
    )
    discharge_notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['status', 'discharge_date'], name='ipd_adm_status_disch_idx'),
            models.Index(fields=['ward', 'status'], name='ipd_adm_ward_status_idx'),
        ]

    def __str__(self) -> str:
        return f"Admission #{self.id} p={self.patient_id} ({self.status})"


class HospitalConfig(models.Model):
    """Singleton hospital settings row.

    ``modules_enabled`` is a free-form JSON blob; the IPD module reads
    ``modules_enabled['ipdSettings']['wardTariffs']``, a mapping of ward
    category to default daily rate.
    """
    hospital_name = models.CharField(max_length=255, default='HMS Hospital')
    hospital_code = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    timezone = models.CharField(max_length=64, default='UTC')
    currency = models.CharField(max_length=8, default='USD')
    modules_enabled = models.JSONField(default=dict, blank=True)
    ipd_enabled = models.BooleanField(default=True)
    billing_enabled = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @classmethod
    def load(cls) -> 'HospitalConfig | None':
        return cls.objects.order_by('id').first()

    def __str__(self) -> str:
        return self.hospital_name


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    table_name = models.CharField(max_length=64, blank=True, null=True)
    record_id = models.CharField(max_length=64, blank=True, null=True)
    old_value = models.JSONField(blank=True, null=True)
    new_value = models.JSONField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='ipd_audit_action_idx'),
            models.Index(fields=['table_name', 'record_id', 'created_at'], name='ipd_audit_record_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.table_name}/{self.record_id}"


class InpatientBill(models.Model):
    """A persisted bill for one admission.

    Holds the same five charge categories as the charges preview;
    ``total_amount`` is always their sum and is recomputed by the
    service whenever a category changes.
    """
    STATUS_PENDING = 'PENDING'
    STATUS_PAID = 'PAID'
    STATUS_PARTIAL = 'PARTIAL'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_PAID, 'Paid'),
        (STATUS_PARTIAL, 'Partially paid'),
        (STATUS_CANCELLED, 'Cancelled'),
    )
    PAYMENT_MODE_CHOICES = (
        ('CASH', 'Cash'),
        ('CARD', 'Card'),
        ('UPI', 'UPI'),
        ('NET_BANKING', 'Net banking'),
        ('INSURANCE', 'Insurance'),
    )

    admission = models.ForeignKey(Admission, on_delete=models.CASCADE, related_name='bills')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='inpatient_bills')
    room_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    procedure_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    medicine_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    lab_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    other_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    payment_mode = models.CharField(max_length=16, choices=PAYMENT_MODE_CHOICES, blank=True)
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='inpatient_bills_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    CHARGE_FIELDS = ('room_charges', 'procedure_charges', 'medicine_charges', 'lab_charges', 'other_charges')

    class Meta:
        indexes = [
            models.Index(fields=['admission', 'created_at'], name='ipd_bill_admission_idx'),
        ]

    def recompute_total(self) -> Decimal:
        self.total_amount = sum((getattr(self, f) for f in self.CHARGE_FIELDS), Decimal('0'))
        return self.total_amount

    def __str__(self) -> str:
        return f"Bill #{self.id} adm={self.admission_id} ({self.status})"
