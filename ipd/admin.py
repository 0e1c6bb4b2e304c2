"""
Django admin registrations for the IPD models.

Lets superusers inspect wards, beds and admissions under ``/admin/``
and edit the hospital configuration, including the ward tariff map.
"""
from django.contrib import admin

from .models import Admission, AuditEvent, Bed, HospitalConfig, InpatientBill, Patient, User, Ward


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'full_name', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'full_name')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'age', 'gender', 'patient_type')
    list_filter = ('patient_type',)
    search_fields = ('name', 'phone')


class BedInline(admin.TabularInline):
    model = Bed
    extra = 0


@admin.register(Ward)
class WardAdmin(admin.ModelAdmin):
    list_display = ('name', 'type', 'capacity', 'current_occupancy', 'daily_rate', 'is_active')
    list_filter = ('type', 'is_active')
    search_fields = ('name',)
    inlines = [BedInline]


@admin.register(Admission)
class AdmissionAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'ward', 'bed', 'admission_date', 'status', 'discharge_date')
    list_filter = ('status', 'admission_type', 'ward')
    search_fields = ('patient__name', 'admission_reason')
    raw_id_fields = ('patient', 'bed', 'admitted_by', 'discharged_by')


@admin.register(InpatientBill)
class InpatientBillAdmin(admin.ModelAdmin):
    list_display = ('id', 'admission', 'patient', 'total_amount', 'paid_amount', 'status', 'created_at')
    list_filter = ('status', 'payment_mode')
    raw_id_fields = ('admission', 'patient', 'created_by')


@admin.register(HospitalConfig)
class HospitalConfigAdmin(admin.ModelAdmin):
    list_display = ('hospital_name', 'currency', 'timezone', 'updated_at')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'table_name', 'record_id', 'user')
    list_filter = ('action', 'table_name')
    readonly_fields = ('user', 'action', 'table_name', 'record_id', 'old_value', 'new_value', 'created_at')
