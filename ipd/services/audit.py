from typing import Optional, Any, Dict
from django.contrib.auth import get_user_model
from ipd.models import AuditEvent

User = get_user_model()


def log_action(*, user: Optional[User], action: str, table_name: Optional[str]=None, record_id=None,
               old_value: Optional[Dict[str, Any]]=None, new_value: Optional[Dict[str, Any]]=None) -> AuditEvent:
    return AuditEvent.objects.create(
        user=user if getattr(user, 'pk', None) else None,
        action=action,
        table_name=table_name,
        record_id=str(record_id) if record_id is not None else None,
        old_value=old_value,
        new_value=new_value,
    )
