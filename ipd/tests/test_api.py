"""
Integration tests for the inpatient API.

These tests drive the HTTP endpoints with DRF's APIClient inside
APITestCase: role gating, the charges preview and statistics
payloads, and the admission/ward/config flows that change occupancy.

To run the tests:

```
pytest -q ipd/tests
```
"""
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.test import override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ipd.models import Admission, AuditEvent, Bed, HospitalConfig, Patient, User, Ward


class IPDAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(username='admin1', password='P@ssw0rd1', role=User.ROLE_ADMIN)
        self.doctor = User.objects.create_user(username='doc1', password='P@ssw0rd1', role=User.ROLE_DOCTOR)
        self.manager = User.objects.create_user(username='wm1', password='P@ssw0rd1', role=User.ROLE_WARD_MANAGER)
        self.nurse = User.objects.create_user(username='nurse1', password='P@ssw0rd1', role=User.ROLE_NURSE)
        self.clerk = User.objects.create_user(username='rec1', password='P@ssw0rd1', role=User.ROLE_RECEPTIONIST)

        HospitalConfig.objects.create(
            modules_enabled={'ipdSettings': {'wardTariffs': {'PRIVATE': 2500, 'GENERAL': 1000}}},
        )
        self.ward = Ward.objects.create(name='Private Wing', type=Ward.TYPE_PRIVATE, capacity=2)
        self.bed1 = Bed.objects.create(ward=self.ward, bed_number='1', bed_type=Bed.TYPE_PRIVATE)
        self.bed2 = Bed.objects.create(ward=self.ward, bed_number='2', bed_type=Bed.TYPE_PRIVATE)
        self.other_ward = Ward.objects.create(name='General A', type=Ward.TYPE_GENERAL, capacity=1)
        self.other_bed = Bed.objects.create(ward=self.other_ward, bed_number='1')
        self.patient = Patient.objects.create(name='Asha Rao', age=42, gender='F')

    def authenticate(self, user: User) -> APIClient:
        """Return an authenticated APIClient for the given user."""
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def admit(self, user=None, **overrides):
        payload = {
            'patientId': self.patient.id,
            'wardId': self.ward.id,
            'bedId': self.bed1.id,
            'admissionDate': (timezone.now() - timedelta(hours=49)).isoformat(),
            'admissionType': 'PLANNED',
            'admissionReason': 'Post-operative care',
        }
        payload.update(overrides)
        return self.authenticate(user or self.doctor).post('/api/admissions', payload, format='json')

    # -- charges preview ---------------------------------------------------

    def test_charges_preview_for_active_admission(self):
        admission_id = self.admit().data['data']['admission']['id']
        resp = self.authenticate(self.nurse).get(f'/api/admissions/{admission_id}/charges-preview')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        body = resp.json()
        self.assertTrue(body['success'])
        charges = body['data']['charges']
        self.assertEqual(charges['details'], {'wardType': 'PRIVATE', 'tariffPerDay': 2500, 'daysCharged': 3})
        self.assertEqual(charges['roomCharges'], 7500)
        self.assertEqual(charges['totalAmount'], 7500)
        self.assertEqual(charges['labCharges'], 0)

    def test_charges_preview_unknown_admission_is_zero(self):
        resp = self.authenticate(self.doctor).get('/api/admissions/999999/charges-preview')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        charges = resp.json()['data']['charges']
        self.assertEqual(charges['totalAmount'], 0)
        self.assertEqual(charges['details'], {})

    def test_charges_preview_non_numeric_id_is_zero(self):
        resp = self.authenticate(self.nurse).get('/api/admissions/abc/charges-preview')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        body = resp.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['charges']['totalAmount'], 0)

    def test_unmatched_route_is_json_404(self):
        client = self.authenticate(self.doctor)
        for url in ('/api/admissions/abc', '/api/no-such-thing'):
            resp = client.get(url)
            self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND, url)
            self.assertEqual(resp['Content-Type'], 'application/json')
            self.assertEqual(resp.json(), {'success': False, 'message': 'Not found'})

    def test_charges_preview_failure_is_generic_500(self):
        with mock.patch('ipd.views.admissions.compute_charges_preview', side_effect=RuntimeError('db gone')):
            resp = self.authenticate(self.admin).get('/api/admissions/1/charges-preview')
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.json(), {'success': False, 'message': 'Failed to compute charges'})

    def test_charges_preview_roles(self):
        for user in (self.admin, self.doctor, self.manager, self.nurse):
            resp = self.authenticate(user).get('/api/admissions/1/charges-preview')
            self.assertEqual(resp.status_code, status.HTTP_200_OK, user.role)
        resp = self.authenticate(self.clerk).get('/api/admissions/1/charges-preview')
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(resp.json()['success'])

    # -- statistics --------------------------------------------------------

    def test_admission_stats(self):
        self.admit()
        resp = self.authenticate(self.manager).get('/api/admissions/stats')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()['data']
        self.assertEqual(data['totalAdmissions'], 1)
        self.assertEqual(data['currentAdmissions'], 1)
        self.assertEqual(data['dischargedToday'], 0)
        self.assertEqual(data['admissionsByType'], [{'admissionType': 'PLANNED', 'count': 1}])
        self.assertEqual(data['admissionsByWard'],
                         [{'wardId': self.ward.id, 'wardName': 'Private Wing', 'count': 1}])
        self.assertEqual(data['averageStayDuration'], 0)

    def test_admission_stats_forbidden_for_nurse(self):
        resp = self.authenticate(self.nurse).get('/api/admissions/stats')
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_admission_stats_failure_is_500(self):
        with mock.patch('ipd.views.admissions.compute_admission_stats', side_effect=RuntimeError('boom')):
            resp = self.authenticate(self.admin).get('/api/admissions/stats')
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(resp.json()['success'])

    # -- admissions --------------------------------------------------------

    def test_admit_occupies_bed_and_ward(self):
        resp = self.admit()
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        admission = resp.data['data']['admission']
        self.assertEqual(admission['status'], 'ADMITTED')
        self.assertEqual(admission['admittedByUser']['id'], self.doctor.id)
        self.bed1.refresh_from_db()
        self.ward.refresh_from_db()
        self.patient.refresh_from_db()
        self.assertTrue(self.bed1.is_occupied)
        self.assertEqual(self.ward.current_occupancy, 1)
        self.assertEqual(self.patient.patient_type, Patient.TYPE_INPATIENT)
        self.assertTrue(AuditEvent.objects.filter(action='CREATE_ADMISSION', record_id=str(admission['id'])).exists())

    def test_admit_rejects_occupied_bed(self):
        self.admit()
        other = Patient.objects.create(name='Ravi')
        resp = self.admit(patientId=other.id)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()['message'], 'Bed is already occupied')

    def test_admit_rejects_bed_from_other_ward(self):
        resp = self.admit(bedId=self.other_bed.id)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()['message'], 'Bed does not belong to the specified ward')

    def test_admit_rejects_patient_already_admitted(self):
        self.admit()
        resp = self.admit(bedId=self.bed2.id)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()['message'], 'Patient is already admitted')

    def test_admit_unknown_patient_404(self):
        resp = self.admit(patientId=424242)
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json(), {'success': False, 'message': 'Patient not found'})

    def test_admit_validation_error(self):
        resp = self.admit(admissionType='OVERNIGHT', admissionReason='')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        body = resp.json()
        self.assertEqual(body['message'], 'Validation error')
        self.assertIn('admissionType', body['errors'])

    def test_admit_rejects_future_admission_date(self):
        resp = self.admit(admissionDate=(timezone.now() + timedelta(days=3)).isoformat())
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('admissionDate', resp.json()['errors'])
        self.assertFalse(Admission.objects.exists())

    def test_admit_strips_markup(self):
        resp = self.admit(admissionReason='<script>x</script>Fever')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('<script>', resp.data['data']['admission']['admissionReason'])

    def test_nurse_cannot_admit(self):
        resp = self.admit(user=self.nurse)
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_admissions_filters_and_pagination(self):
        self.admit()
        second = Patient.objects.create(name='Ravi Kumar')
        self.admit(patientId=second.id, bedId=self.bed2.id, admissionType='EMERGENCY', admissionReason='Chest pain')

        client = self.authenticate(self.manager)
        resp = client.get('/api/admissions', {'limit': 1, 'page': 2})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()['data']
        self.assertEqual(len(data['admissions']), 1)
        self.assertEqual(data['pagination'], {
            'currentPage': 2, 'totalPages': 2, 'totalItems': 2, 'itemsPerPage': 1,
            'hasNextPage': False, 'hasPrevPage': True,
        })

        resp = client.get('/api/admissions', {'search': 'chest'})
        self.assertEqual([a['patient']['name'] for a in resp.json()['data']['admissions']], ['Ravi Kumar'])
        resp = client.get('/api/admissions', {'admissionType': 'PLANNED'})
        self.assertEqual(resp.json()['data']['pagination']['totalItems'], 1)

    def test_nurse_cannot_list_all_admissions_but_sees_current(self):
        self.admit()
        client = self.authenticate(self.nurse)
        self.assertEqual(client.get('/api/admissions').status_code, status.HTTP_403_FORBIDDEN)
        resp = client.get('/api/admissions/current', {'wardId': self.ward.id})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.json()['data']['admissions']), 1)
        resp = client.get('/api/admissions/current', {'wardId': self.other_ward.id})
        self.assertEqual(resp.json()['data']['admissions'], [])

    def test_get_admission_detail_and_404(self):
        admission_id = self.admit().data['data']['admission']['id']
        client = self.authenticate(self.nurse)
        resp = client.get(f'/api/admissions/{admission_id}')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()['data']['admission']['bed']['bedNumber'], '1')
        resp = client.get('/api/admissions/999999')
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json()['message'], 'Admission not found')

    def test_update_moves_patient_to_other_bed(self):
        admission_id = self.admit().data['data']['admission']['id']
        resp = self.authenticate(self.doctor).put(
            f'/api/admissions/{admission_id}',
            {'wardId': self.other_ward.id, 'bedId': self.other_bed.id, 'notes': 'Step-down'},
            format='json',
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()['data']['admission']['ward']['name'], 'General A')
        self.bed1.refresh_from_db()
        self.other_bed.refresh_from_db()
        self.ward.refresh_from_db()
        self.other_ward.refresh_from_db()
        self.assertFalse(self.bed1.is_occupied)
        self.assertTrue(self.other_bed.is_occupied)
        self.assertEqual((self.ward.current_occupancy, self.other_ward.current_occupancy), (0, 1))
        event = AuditEvent.objects.get(action='UPDATE_ADMISSION')
        self.assertEqual(event.old_value['bedId'], self.bed1.id)
        self.assertEqual(event.new_value['bedId'], self.other_bed.id)

    def test_update_cannot_change_status(self):
        admission_id = self.admit().data['data']['admission']['id']
        resp = self.authenticate(self.doctor).put(
            f'/api/admissions/{admission_id}', {'status': 'DISCHARGED', 'notes': 'x'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('status', resp.json()['errors'])
        admission = Admission.objects.get(pk=admission_id)
        self.assertEqual(admission.status, Admission.STATUS_ADMITTED)
        self.assertIsNone(admission.discharge_date)
        self.bed1.refresh_from_db()
        self.ward.refresh_from_db()
        self.assertTrue(self.bed1.is_occupied)
        self.assertEqual(self.ward.current_occupancy, 1)

    def test_nurse_cannot_update_admission(self):
        admission_id = self.admit().data['data']['admission']['id']
        resp = self.authenticate(self.nurse).put(f'/api/admissions/{admission_id}', {'notes': 'x'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_discharge_frees_bed(self):
        admission_id = self.admit().data['data']['admission']['id']
        resp = self.authenticate(self.doctor).put(
            f'/api/admissions/{admission_id}/discharge', {'dischargeNotes': 'Stable'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        admission = resp.json()['data']['admission']
        self.assertEqual(admission['status'], 'DISCHARGED')
        self.assertEqual(admission['dischargedByUser']['id'], self.doctor.id)
        self.assertIsNotNone(admission['dischargeDate'])
        self.bed1.refresh_from_db()
        self.ward.refresh_from_db()
        self.patient.refresh_from_db()
        self.assertFalse(self.bed1.is_occupied)
        self.assertEqual(self.ward.current_occupancy, 0)
        self.assertEqual(self.patient.patient_type, Patient.TYPE_OUTPATIENT)

        resp = self.authenticate(self.doctor).put(f'/api/admissions/{admission_id}/discharge', {}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()['message'], 'Patient is not currently admitted')

    def test_discharge_refused_before_admission_date(self):
        # Rows written outside the API can still carry a future admission date.
        admission = Admission.objects.create(
            patient=self.patient, ward=self.ward, bed=self.bed1,
            admission_date=timezone.now() + timedelta(days=3),
            admission_type=Admission.TYPE_PLANNED, admission_reason='Scheduled surgery',
        )
        resp = self.authenticate(self.doctor).put(f'/api/admissions/{admission.id}/discharge', {}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()['message'], 'Discharge date cannot be earlier than admission date')
        admission.refresh_from_db()
        self.assertEqual(admission.status, Admission.STATUS_ADMITTED)
        self.assertIsNone(admission.discharge_date)

    def test_discharge_never_drives_occupancy_negative(self):
        admission_id = self.admit().data['data']['admission']['id']
        Ward.objects.filter(pk=self.ward.pk).update(current_occupancy=0)
        self.authenticate(self.doctor).put(f'/api/admissions/{admission_id}/discharge', {}, format='json')
        self.ward.refresh_from_db()
        self.assertEqual(self.ward.current_occupancy, 0)

    @override_settings(IPD_DISCHARGE_REQUIRES_NO_DUES=True)
    def test_discharge_blocked_by_pending_dues(self):
        admission_id = self.admit().data['data']['admission']['id']
        resp = self.authenticate(self.doctor).put(f'/api/admissions/{admission_id}/discharge', {}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        body = resp.json()
        self.assertFalse(body['success'])
        self.assertEqual(body['data']['charges']['totalAmount'], 7500)
        self.assertEqual(Admission.objects.get(pk=admission_id).status, 'ADMITTED')

    @override_settings(IPD_DISCHARGE_REQUIRES_NO_DUES=True)
    def test_discharge_allowed_when_no_dues(self):
        self.ward.daily_rate = Decimal('0')
        self.ward.save()
        admission_id = self.admit().data['data']['admission']['id']
        resp = self.authenticate(self.doctor).put(f'/api/admissions/{admission_id}/discharge', {}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    # -- wards & beds ------------------------------------------------------

    def test_create_ward_creates_beds(self):
        resp = self.authenticate(self.manager).post(
            '/api/wards', {'name': 'Cardiac Care', 'type': 'CARDIAC', 'capacity': 3, 'floor': '3'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        ward = resp.json()['data']['ward']
        self.assertEqual([b['bedNumber'] for b in ward['beds']], ['1', '2', '3'])
        self.assertEqual({b['bedType'] for b in ward['beds']}, {'ICU'})
        self.assertEqual(resp.json()['message'], 'Ward created successfully with 3 beds')

    def test_create_ward_duplicate_name(self):
        resp = self.authenticate(self.admin).post(
            '/api/wards', {'name': 'Private Wing', 'type': 'PRIVATE', 'capacity': 1}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()['message'], 'Ward with this name already exists')

    def test_doctor_reads_wards_but_cannot_write(self):
        client = self.authenticate(self.doctor)
        resp = client.get('/api/wards', {'type': 'PRIVATE'})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([w['name'] for w in resp.json()['data']['wards']], ['Private Wing'])
        resp = client.post('/api/wards', {'name': 'X', 'type': 'ICU', 'capacity': 1}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.authenticate(self.nurse).get('/api/wards').status_code, status.HTTP_403_FORBIDDEN)

    def test_update_ward_capacity_adjusts_beds(self):
        client = self.authenticate(self.manager)
        resp = client.put(f'/api/wards/{self.ward.id}', {'capacity': 4, 'dailyRate': '2750.00'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(self.ward.beds.count(), 4)
        self.ward.refresh_from_db()
        self.assertEqual(self.ward.daily_rate, Decimal('2750.00'))

        self.admit()
        resp = client.put(f'/api/wards/{self.ward.id}', {'capacity': 1}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(list(self.ward.beds.values_list('id', flat=True)), [self.bed1.id])

    def test_delete_ward_with_active_admission_needs_force(self):
        self.admit()
        client = self.authenticate(self.admin)
        resp = client.delete(f'/api/wards/{self.ward.id}')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()['data']['activeAdmissions'], 1)

        resp = client.delete(f'/api/wards/{self.ward.id}?force=true')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(Ward.objects.filter(pk=self.ward.pk).exists())
        self.assertEqual(Admission.objects.count(), 0)
        self.assertTrue(AuditEvent.objects.filter(action='DELETE_WARD').exists())

    def test_ward_stats(self):
        self.admit()
        resp = self.authenticate(self.doctor).get('/api/wards/stats')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()['data']
        self.assertEqual(data['totalWards'], 2)
        self.assertEqual(data['totalCapacity'], 3)
        self.assertEqual(data['totalOccupancy'], 1)
        self.assertEqual(data['availableBeds'], 2)
        self.assertEqual(data['occupancyRate'], 33.33)

    def test_available_beds(self):
        self.admit()
        client = self.authenticate(self.nurse)
        resp = client.get('/api/beds/available')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        ids = {b['id'] for b in resp.json()['data']['beds']}
        self.assertEqual(ids, {self.bed2.id, self.other_bed.id})
        resp = client.get('/api/beds/available', {'wardId': self.other_ward.id})
        self.assertEqual([b['id'] for b in resp.json()['data']['beds']], [self.other_bed.id])

    # -- hospital configuration ---------------------------------------------

    def test_config_update_changes_tariffs(self):
        client = self.authenticate(self.admin)
        resp = client.put('/api/config/hospital', {
            'hospitalName': 'City Hospital',
            'modulesEnabled': {'ipdSettings': {'wardTariffs': {'PRIVATE': 4000}}},
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()['data']['config']['hospitalName'], 'City Hospital')

        admission_id = self.admit().data['data']['admission']['id']
        resp = client.get(f'/api/admissions/{admission_id}/charges-preview')
        self.assertEqual(resp.json()['data']['charges']['roomCharges'], 12000)

    def test_config_rejects_negative_tariff(self):
        resp = self.authenticate(self.admin).put('/api/config/hospital', {
            'modulesEnabled': {'ipdSettings': {'wardTariffs': {'ICU': -5}}},
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('modulesEnabled', resp.json()['errors'])

    def test_config_rejects_out_of_range_tariff(self):
        client = self.authenticate(self.admin)
        for raw in ('1e400', '1' + '0' * 400):
            resp = client.put(
                '/api/config/hospital',
                '{"modulesEnabled": {"ipdSettings": {"wardTariffs": {"ICU": ' + raw + '}}}}',
                content_type='application/json',
            )
            self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('modulesEnabled', resp.json()['errors'])

    def test_config_read_for_any_role_write_for_admin_only(self):
        self.assertEqual(self.authenticate(self.clerk).get('/api/config/hospital').status_code, status.HTTP_200_OK)
        resp = self.authenticate(self.doctor).put('/api/config/hospital', {'hospitalName': 'X'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_config_defaults_when_unset(self):
        HospitalConfig.objects.all().delete()
        resp = self.authenticate(self.nurse).get('/api/config/hospital')
        tariffs = resp.json()['data']['config']['modulesEnabled']['ipdSettings']['wardTariffs']
        self.assertEqual(tariffs['ICU'], 5000)
