import logging

from django.db import transaction

from ipd.models import HospitalConfig
from ipd.services.audit import log_action
from ipd.services.tariffs import DEFAULT_WARD_TARIFFS

logger = logging.getLogger(__name__)

_FIELDS = {
    'hospitalName': 'hospital_name',
    'hospitalCode': 'hospital_code',
    'address': 'address',
    'phone': 'phone',
    'email': 'email',
    'timezone': 'timezone',
    'currency': 'currency',
    'modulesEnabled': 'modules_enabled',
    'ipdEnabled': 'ipd_enabled',
    'billingEnabled': 'billing_enabled',
}


def default_config() -> dict:
    """Payload served before the hospital has been configured."""
    return {
        'id': None,
        'hospitalName': HospitalConfig._meta.get_field('hospital_name').default,
        'hospitalCode': '',
        'address': '',
        'phone': '',
        'email': '',
        'timezone': 'UTC',
        'currency': 'USD',
        'modulesEnabled': {'ipdSettings': {'wardTariffs': dict(DEFAULT_WARD_TARIFFS)}},
        'ipdEnabled': True,
        'billingEnabled': True,
    }


def format_config(cfg: HospitalConfig) -> dict:
    data = {key: getattr(cfg, field) for key, field in _FIELDS.items()}
    data['id'] = cfg.id
    data['updatedAt'] = cfg.updated_at.isoformat() if cfg.updated_at else None
    return data


def get_hospital_config() -> dict:
    cfg = HospitalConfig.load()
    return format_config(cfg) if cfg else default_config()


def update_hospital_config(current_user, data: dict) -> dict:
    with transaction.atomic():
        cfg = HospitalConfig.load()
        created = cfg is None
        if created:
            cfg = HospitalConfig()
        old = None if created else format_config(cfg)
        for key, field in _FIELDS.items():
            if key in data:
                setattr(cfg, field, data[key])
        cfg.save()

    new = format_config(cfg)
    log_action(user=current_user, action='CREATE_CONFIG' if created else 'UPDATE_CONFIG',
               table_name='hospital_config', record_id=cfg.id, old_value=old, new_value=new)
    logger.info('hospital configuration %s', 'created' if created else 'updated')
    return new
