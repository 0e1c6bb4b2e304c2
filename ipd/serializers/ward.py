import bleach
from django.conf import settings
from rest_framework import serializers

from ipd.models import Bed, Ward

WARD_TYPES = [c for c, _ in Ward.TYPE_CHOICES]


class WardCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    type = serializers.ChoiceField(choices=WARD_TYPES)
    capacity = serializers.IntegerField(min_value=1, max_value=1000)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    floor = serializers.CharField(max_length=50, required=False, allow_blank=True)
    dailyRate = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0,
                                         required=False, allow_null=True)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Ward name is required')
        return v

    def validate_description(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate_floor(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class WardUpdateSerializer(WardCreateSerializer):
    name = serializers.CharField(max_length=100, required=False)
    type = serializers.ChoiceField(choices=WARD_TYPES, required=False)
    capacity = serializers.IntegerField(min_value=1, max_value=1000, required=False)
    isActive = serializers.BooleanField(required=False)


class WardSearchSerializer(serializers.Serializer):
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=WARD_TYPES, required=False)
    isActive = serializers.ChoiceField(choices=['true', 'false'], required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=settings.IPD_MAX_PAGE_SIZE, required=False)


class WardDeleteQuerySerializer(serializers.Serializer):
    force = serializers.BooleanField(required=False, default=False)


class AvailableBedsQuerySerializer(serializers.Serializer):
    wardId = serializers.IntegerField(min_value=1, required=False)
    bedType = serializers.ChoiceField(choices=[c for c, _ in Bed.TYPE_CHOICES], required=False)


BED_TYPES = [c for c, _ in Bed.TYPE_CHOICES]


class BedCreateSerializer(serializers.Serializer):
    wardId = serializers.IntegerField(min_value=1)
    bedNumber = serializers.CharField(max_length=20)
    bedType = serializers.ChoiceField(choices=BED_TYPES, required=False)

    def validate_bedNumber(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Bed number is required')
        return v


class BedUpdateSerializer(BedCreateSerializer):
    wardId = None
    bedNumber = serializers.CharField(max_length=20, required=False)
    isActive = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if 'isOccupied' in self.initial_data:
            raise serializers.ValidationError({'isOccupied': 'Occupancy changes with admissions and discharges'})
        return attrs


class BedSearchSerializer(serializers.Serializer):
    wardId = serializers.IntegerField(min_value=1, required=False)
    bedType = serializers.ChoiceField(choices=BED_TYPES, required=False)
    isOccupied = serializers.ChoiceField(choices=['true', 'false'], required=False)
    isActive = serializers.ChoiceField(choices=['true', 'false'], required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=settings.IPD_MAX_PAGE_SIZE, required=False)
