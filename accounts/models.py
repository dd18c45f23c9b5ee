import uuid
from django.db import models
from django.utils import timezone
from django.contrib.auth.models import AbstractUser


class Role(models.TextChoices):
    ADMIN  = "ADMIN",  "Admin"
    BOSS   = "BOSS",   "Boss"
    LEADER = "LEADER", "Leader"
    EMP    = "EMP",    "Employee"


class User(AbstractUser):
    user_id    = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name       = models.CharField(max_length=120)
    email      = models.EmailField(unique=True)
    role       = models.CharField(max_length=8, choices=Role.choices, default=Role.EMP)
    position   = models.CharField(max_length=120, blank=True)
    # direct leader; scores this user's leader evaluation
    leader     = models.ForeignKey("self", on_delete=models.SET_NULL, null=True, blank=True, related_name="subordinates")
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name or self.get_full_name() or self.username
