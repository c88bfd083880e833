# accounts/models.py

from django.contrib.auth.models import User
from django.db import models
from django.core.validators import RegexValidator
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# VALIDATORS
# =============================================================================

phone_validator = RegexValidator(
    regex=r'^\+?\d{9,15}$',
    message="Phone number must be entered in the format: '+8801XXXXXXXXX'. Up to 15 digits allowed."
)


# =============================================================================
# ROLES
# =============================================================================

class Role(models.TextChoices):
    SUPER_ADMIN = 'SUPER_ADMIN', 'Super Administrator'
    ADMIN = 'ADMIN', 'Administrator'
    ACCOUNTANT = 'ACCOUNTANT', 'Accountant'
    ADMISSION = 'ADMISSION', 'Admission Officer'
    RECRUITMENT = 'RECRUITMENT', 'Recruitment'
    DIGITAL_MARKETING = 'DIGITAL_MARKETING', 'Digital Marketing'
    MOTION_GRAPHICS = 'MOTION_GRAPHICS', 'Motion Graphics'
    COORDINATOR = 'COORDINATOR', 'Coordinator'
    IT_ADMIN = 'IT_ADMIN', 'IT Administrator'


# =============================================================================
# USER PROFILE MODEL
# =============================================================================

class UserProfile(BaseModel):
    """Back-office staff profile; the role drives every capability check."""

    # -------------------------------------------------------------------------
    # CORE RELATIONSHIPS
    # -------------------------------------------------------------------------

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='profile'
    )
    role = models.CharField(
        "Role",
        max_length=30,
        choices=Role.choices,
        db_index=True
    )

    # -------------------------------------------------------------------------
    # CONTACT & EMPLOYMENT
    # -------------------------------------------------------------------------

    mobile = models.CharField(
        "Mobile Number",
        max_length=15,
        blank=True,
        validators=[phone_validator]
    )
    employee_id = models.CharField(
        "Employee ID",
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        help_text="Unique staff identifier"
    )
    department = models.CharField("Department", max_length=100, blank=True)

    class Meta:
        verbose_name = "User Profile"
        verbose_name_plural = "User Profiles"
        ordering = ['user__username']

    def __str__(self):
        return f"{self.display_name} ({self.get_role_display()})"

    @property
    def display_name(self):
        return self.user.get_full_name() or self.user.username
