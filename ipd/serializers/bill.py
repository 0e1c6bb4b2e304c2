import bleach
from django.conf import settings
from rest_framework import serializers

from ipd.models import InpatientBill


def _amount(**kwargs):
    return serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, **kwargs)


class InpatientBillCreateSerializer(serializers.Serializer):
    admissionId = serializers.IntegerField(min_value=1)
    roomCharges = _amount(required=False, allow_null=True)
    procedureCharges = _amount(required=False, default=0)
    medicineCharges = _amount(required=False, default=0)
    labCharges = _amount(required=False, default=0)
    otherCharges = _amount(required=False, default=0)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class InpatientBillUpdateSerializer(serializers.Serializer):
    roomCharges = _amount(required=False)
    procedureCharges = _amount(required=False)
    medicineCharges = _amount(required=False)
    labCharges = _amount(required=False)
    otherCharges = _amount(required=False)
    status = serializers.ChoiceField(choices=[c for c, _ in InpatientBill.STATUS_CHOICES], required=False)
    paymentMode = serializers.ChoiceField(choices=[c for c, _ in InpatientBill.PAYMENT_MODE_CHOICES],
                                          required=False, allow_null=True)
    paidAmount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0,
                                          required=False, allow_null=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class InpatientBillSearchSerializer(serializers.Serializer):
    admissionId = serializers.IntegerField(min_value=1, required=False)
    patientId = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=[c for c, _ in InpatientBill.STATUS_CHOICES], required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=settings.IPD_MAX_PAGE_SIZE, required=False)
