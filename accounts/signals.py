import logging
from django.db.models.signals import post_migrate
from django.dispatch import receiver
from .models import Role

logger = logging.getLogger("accounts")

DEFAULT_ROLES = [
    {"name": "admin", "description": "Operator managing routes, trains and schedules"},
    {"name": "user", "description": "Passenger booking seats"},
]


@receiver(post_migrate)
def create_default_roles(sender, **kwargs):
    """
    Create default roles after migration.
    """
    if sender.name != "accounts":
        return

    for role_data in DEFAULT_ROLES:
        _, created = Role.objects.get_or_create(
            name=role_data["name"],
            defaults={"description": role_data["description"]},
        )
        if created:
            logger.info(f"Role created: {role_data['name']}")
