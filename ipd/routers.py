"""
URL mappings for the inpatient API.

Paths carry no trailing slash; ``APPEND_SLASH`` is off.
"""
from django.urls import path

from .auth_views import RefreshView, login_view
from .views import admissions, beds, bills, config, health, wards

urlpatterns = [
    path('healthz', health.healthz, name='healthz'),

    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', RefreshView.as_view(), name='token_refresh'),

    path('api/admissions', admissions.admissions, name='admissions'),
    path('api/admissions/current', admissions.current_admissions, name='current_admissions'),
    path('api/admissions/stats', admissions.admission_stats, name='admission_stats'),
    path('api/admissions/<int:admission_id>', admissions.admission_detail, name='admission_detail'),
    path('api/admissions/<str:admission_id>/charges-preview', admissions.charges_preview,
         name='admission_charges_preview'),
    path('api/admissions/<int:admission_id>/discharge', admissions.discharge, name='admission_discharge'),

    path('api/wards', wards.wards, name='wards'),
    path('api/wards/stats', wards.ward_stats, name='ward_stats'),
    path('api/wards/<int:ward_id>', wards.ward_detail, name='ward_detail'),

    path('api/beds', beds.beds, name='beds'),
    path('api/beds/available', beds.available_beds, name='available_beds'),
    path('api/beds/stats', beds.bed_stats, name='bed_stats'),
    path('api/beds/<int:bed_id>', beds.bed_detail, name='bed_detail'),

    path('api/inpatient-bills', bills.inpatient_bills, name='inpatient_bills'),
    path('api/inpatient-bills/admission/<int:admission_id>', bills.admission_bills, name='admission_bills'),
    path('api/inpatient-bills/<int:bill_id>', bills.inpatient_bill_detail, name='inpatient_bill_detail'),

    path('api/config/hospital', config.hospital_config, name='hospital_config'),
]
