# ipd/management/commands/seed_ipd.py
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction

from ipd.models import Bed, HospitalConfig, User, Ward
from ipd.services.tariffs import DEFAULT_WARD_TARIFFS
from ipd.services.wards import bed_type_for_ward

DEMO_USERS = [
    ("admin", User.ROLE_ADMIN),
    ("doctor", User.ROLE_DOCTOR),
    ("wardmanager", User.ROLE_WARD_MANAGER),
    ("nurse", User.ROLE_NURSE),
]

DEMO_WARDS = [
    ("General Ward A", Ward.TYPE_GENERAL, 20, "Ground"),
    ("Semi-Private Ward", Ward.TYPE_SEMI_PRIVATE, 10, "First"),
    ("Private Suites", Ward.TYPE_PRIVATE, 6, "Second"),
    ("Intensive Care Unit", Ward.TYPE_ICU, 8, "Second"),
]


class Command(BaseCommand):
    help = "Create demo staff, wards with beds and the hospital configuration (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="changeme123", help="Password set on demo users.")

    @transaction.atomic
    def handle(self, *args, **opts):
        for username, role in DEMO_USERS:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"role": role, "full_name": username.title(), "password": make_password(opts["password"])},
            )
            if not created and u.role != role:
                u.role = role
                u.save(update_fields=["role"])
            self.stdout.write(self.style.SUCCESS(f"user: {username} ({role})"))

        for name, ward_type, capacity, floor in DEMO_WARDS:
            ward, created = Ward.objects.get_or_create(
                name=name, defaults={"type": ward_type, "capacity": capacity, "floor": floor}
            )
            if created:
                Bed.objects.bulk_create([
                    Bed(ward=ward, bed_number=str(n), bed_type=bed_type_for_ward(ward_type))
                    for n in range(1, capacity + 1)
                ])
            self.stdout.write(self.style.SUCCESS(f"ward: {name} ({ward.beds.count()} beds)"))

        if HospitalConfig.load() is None:
            HospitalConfig.objects.create(
                modules_enabled={"ipdSettings": {"wardTariffs": dict(DEFAULT_WARD_TARIFFS)}},
            )
            self.stdout.write(self.style.SUCCESS("hospital configuration created"))
        self.stdout.write(self.style.SUCCESS("IPD demo data ready."))
