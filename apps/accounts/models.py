from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.validators import RegexValidator
from django.db import models
import uuid


member_id_validator = RegexValidator(
    regex=r'^\d+/\d+$',
    message='Member ID must be in format: ward/house (e.g., 1/2)',
)


class UserRole(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    USER = 'user', 'User'


class UserManager(BaseUserManager):
    """Custom user manager for member-ID based authentication."""

    def create_user(self, member_id, password=None, **extra_fields):
        if not member_id:
            raise ValueError('Member ID is required')

        user = self.model(member_id=member_id.strip(), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, member_id, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(member_id, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Office or household login, identified by the household's Mahal ID."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    member_id = models.CharField(
        max_length=20,
        unique=True,
        db_index=True,
        validators=[member_id_validator],
    )
    name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=20, blank=True)

    role = models.CharField(
        max_length=10,
        choices=UserRole.choices,
        default=UserRole.USER,
    )

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'member_id'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['role'], name='users_role_0b1f4e_idx'),
            models.Index(fields=['created_at'], name='users_created_5f3c2a_idx'),
        ]

    def __str__(self):
        return self.member_id

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN or self.is_superuser

    def get_display_name(self):
        """Return name or the member ID."""
        return self.name or self.member_id
