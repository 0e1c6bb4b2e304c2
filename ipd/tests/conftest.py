import pytest
from django.core.cache import cache
from django.utils import timezone

from ipd.models import Admission, Bed, HospitalConfig, Patient, User, Ward


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make(username, role, password='P@ssw0rd1'):
        return User.objects.create_user(username=username, password=password, role=role, full_name=username.title())
    return _make


@pytest.fixture
def make_ward(db):
    def _make(name='Ward', type=Ward.TYPE_GENERAL, beds=2, daily_rate=None):
        ward = Ward.objects.create(name=name, type=type, capacity=beds, daily_rate=daily_rate)
        for n in range(1, beds + 1):
            Bed.objects.create(ward=ward, bed_number=str(n))
        return ward
    return _make


@pytest.fixture
def make_admission(db):
    counter = {'n': 0}

    def _make(ward, *, admitted_at=None, discharged_at=None, admission_type=Admission.TYPE_PLANNED):
        counter['n'] += 1
        patient = Patient.objects.create(name=f'Patient {counter["n"]}')
        bed = ward.beds.filter(is_occupied=False).first() or Bed.objects.create(
            ward=ward, bed_number=f'x{counter["n"]}')
        return Admission.objects.create(
            patient=patient,
            ward=ward,
            bed=bed,
            admission_date=admitted_at or timezone.now(),
            admission_type=admission_type,
            admission_reason='Observation',
            status=Admission.STATUS_DISCHARGED if discharged_at else Admission.STATUS_ADMITTED,
            discharge_date=discharged_at,
        )
    return _make


@pytest.fixture
def ward_tariffs(db):
    def _set(tariffs):
        return HospitalConfig.objects.create(modules_enabled={'ipdSettings': {'wardTariffs': tariffs}})
    return _set
