from django.core.exceptions import ValidationError
from django.db.models.signals import post_save, pre_delete
from django.dispatch import receiver

from .models import Hajari, Labor, Membership, Record, RecordSettlement

""" Block record deletion if any settlements were applied."""


# pre_delete fires just before Django deletes the instance
@receiver(pre_delete, sender=Record)
def prevent_delete_record_with_settlements(sender, instance, **kwargs):
    if RecordSettlement.objects.filter(record=instance).exists():
        raise ValidationError("Cannot delete a record with settlements.")


"""Block deletion of a laborer whose attendance was recorded."""


@receiver(pre_delete, sender=Labor)
def prevent_delete_labor_with_hajari(sender, instance, **kwargs):
    if Hajari.objects.filter(labor=instance).exists():
        raise ValidationError("Cannot delete a laborer with attendance entries.")


"""First membership becomes the user's default organization."""


@receiver(post_save, sender=Membership)
def set_default_organization(sender, instance, created, **kwargs):
    if not created or not instance.is_active:
        return
    user = instance.user
    if user.default_organization_id is None:
        user.default_organization_id = instance.organization_id
        user.save(update_fields=["default_organization"])
