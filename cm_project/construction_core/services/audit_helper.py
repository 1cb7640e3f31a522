import json
import logging

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from ..models import AuditLog

logger = logging.getLogger(__name__)


def log_action(
    *,
    action: str,
    entity: str,
    entity_id,
    details: str = "",
    organization=None,
    user=None,
    metadata: dict | None = None,
):
    """
    Central audit logger.
    Never raises: a failed audit write is logged and dropped so the caller's
    operation goes on. The insert runs in its own savepoint, so a database
    error here doesn't poison an enclosing atomic block.
    """
    try:
        if metadata is not None:
            # Decimals/dates -> strings so the JSON column accepts it
            metadata = json.loads(json.dumps(metadata, cls=DjangoJSONEncoder))
        with transaction.atomic():
            return AuditLog.objects.create(
                organization=organization,
                user=user if getattr(user, "pk", None) else None,
                action=action,
                entity=entity,
                entity_id=str(entity_id),
                details=details or "",
                metadata=metadata,
            )
    except Exception:
        logger.exception(
            "Failed to write audit log %s %s(%s)", action, entity, entity_id
        )
        return None


def recent_logs(organization, limit=None):
    limit = limit or settings.AUDIT_LOG_LIMIT
    return list(
        AuditLog.objects.for_organization(organization)
        .select_related("user")
        .order_by("-created_at", "-id")[:limit]
    )
