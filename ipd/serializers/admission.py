import bleach
from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from ipd.models import Admission


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class AdmissionCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    wardId = serializers.IntegerField(min_value=1)
    bedId = serializers.IntegerField(min_value=1)
    admissionDate = serializers.DateTimeField()
    admissionType = serializers.ChoiceField(choices=[c for c, _ in Admission.TYPE_CHOICES])
    admissionReason = serializers.CharField(max_length=500)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    def validate_admissionDate(self, v):
        if v > timezone.now():
            raise serializers.ValidationError('Admission date cannot be in the future')
        return v

    def validate_admissionReason(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Admission reason is required')
        return v

    def validate_notes(self, v):
        return _clean(v)


class AdmissionUpdateSerializer(serializers.Serializer):
    wardId = serializers.IntegerField(min_value=1, required=False)
    bedId = serializers.IntegerField(min_value=1, required=False)
    admissionType = serializers.ChoiceField(choices=[c for c, _ in Admission.TYPE_CHOICES], required=False)
    admissionReason = serializers.CharField(max_length=500, required=False)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    dischargeNotes = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    def validate_admissionReason(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Admission reason is required')
        return v

    def validate_notes(self, v):
        return _clean(v)

    def validate_dischargeNotes(self, v):
        return _clean(v)

    def validate(self, attrs):
        # Status only changes through admit and discharge, which keep beds in step.
        if 'status' in self.initial_data:
            raise serializers.ValidationError({'status': 'Use the discharge endpoint to change admission status'})
        return attrs


class DischargeSerializer(serializers.Serializer):
    dischargeNotes = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    def validate_dischargeNotes(self, v):
        return _clean(v)


class AdmissionSearchSerializer(serializers.Serializer):
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)
    patientId = serializers.IntegerField(min_value=1, required=False)
    wardId = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=[c for c, _ in Admission.STATUS_CHOICES], required=False)
    admissionType = serializers.ChoiceField(choices=[c for c, _ in Admission.TYPE_CHOICES], required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=settings.IPD_MAX_PAGE_SIZE, required=False)


class CurrentAdmissionsQuerySerializer(serializers.Serializer):
    wardId = serializers.IntegerField(min_value=1, required=False)
