import math

import bleach
from rest_framework import serializers

# Largest value Ward.daily_rate can hold.
MAX_DAILY_RATE = 99_999_999.99


class HospitalConfigSerializer(serializers.Serializer):
    hospitalName = serializers.CharField(max_length=255, required=False)
    hospitalCode = serializers.CharField(max_length=50, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    timezone = serializers.CharField(max_length=64, required=False)
    currency = serializers.CharField(max_length=8, required=False)
    modulesEnabled = serializers.DictField(required=False)
    ipdEnabled = serializers.BooleanField(required=False)
    billingEnabled = serializers.BooleanField(required=False)

    def validate_hospitalName(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Hospital name is required')
        return v

    def validate_address(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate_modulesEnabled(self, v):
        ipd = v.get('ipdSettings')
        if ipd is None:
            return v
        if not isinstance(ipd, dict):
            raise serializers.ValidationError('ipdSettings must be an object')
        tariffs = ipd.get('wardTariffs')
        if tariffs is None:
            return v
        if not isinstance(tariffs, dict):
            raise serializers.ValidationError('wardTariffs must map ward types to daily rates')
        for ward_type, rate in tariffs.items():
            if isinstance(rate, bool) or not isinstance(rate, (int, float)):
                raise serializers.ValidationError(f'wardTariffs.{ward_type} must be a non-negative number')
            if isinstance(rate, float) and not math.isfinite(rate) or not 0 <= rate <= MAX_DAILY_RATE:
                raise serializers.ValidationError(
                    f'wardTariffs.{ward_type} must be between 0 and {MAX_DAILY_RATE}')
        return v
