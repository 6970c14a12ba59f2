from django.db import models
import uuid

from apps.accounts.models import member_id_validator


class Member(models.Model):
    """Household head as recorded in the Mahal census."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    mahal_id = models.CharField(
        max_length=20,
        unique=True,
        db_index=True,
        validators=[member_id_validator],
    )
    name = models.CharField(max_length=150)
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'members'
        ordering = ['mahal_id']

    def __str__(self):
        return f"{self.mahal_id} - {self.name}"
