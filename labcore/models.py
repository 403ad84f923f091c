"""
Database models for the pathology lab backend.

These models capture users and their role hierarchy, labs with their
managers and addresses, the test catalog, the priced lab offerings of
catalog entries, and the test orders clients submit.  Primary entities
are soft-deleted: the default ``objects`` manager hides deleted rows and
``all_objects`` is the explicit escape hatch for code that needs them.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.contrib.auth.models import PermissionsMixin
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Role(models.TextChoices):
    ADMIN = 'ADMIN', 'Admin'
    MANAGER = 'MANAGER', 'Manager'
    STAFF = 'STAFF', 'Staff'
    CLIENT = 'CLIENT', 'Client'


class EntityType(models.TextChoices):
    USER = 'USER', 'User'
    LAB = 'LAB', 'Lab'


class TestStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    COLLECTION_PENDING = 'COLLECTION_PENDING', 'Collection pending'
    COLLECTED = 'COLLECTED', 'Collected'
    PROCESSING = 'PROCESSING', 'Processing'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class SoftDeleteQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(is_deleted=False)

    def soft_delete(self) -> int:
        return self.update(is_deleted=True, updated_at=timezone.now())


class ActiveManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Default manager that only ever sees rows with ``is_deleted=False``."""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class TimestampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UserManager(BaseUserManager.from_queryset(SoftDeleteQuerySet)):
    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('email is required')
        extra_fields.setdefault('role', Role.CLIENT)
        user = self.model(email=email.strip(), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('name', 'Administrator')
        extra_fields['role'] = Role.ADMIN
        extra_fields['is_staff'] = True
        extra_fields['is_superuser'] = True
        extra_fields['is_email_verified'] = True
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin, TimestampedModel):
    """An account holder with one of the four roles.

    ``managed_by`` points at the Manager who owns a Staff account and is
    left empty for every other role.  ``created_by`` records whoever
    created the account through the administration endpoints.
    """
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254)
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.CLIENT, db_index=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False, help_text='Can log into the Django admin site.')
    is_deleted = models.BooleanField(default=False, db_index=True)
    is_email_verified = models.BooleanField(default=False)

    email_verification_token = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    email_verification_token_expiry = models.DateTimeField(null=True, blank=True)
    reset_token = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    reset_token_expiry = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.SET_NULL, related_name='created_users'
    )
    managed_by = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.SET_NULL, related_name='managed_staff'
    )

    objects = UserManager()
    all_objects = SoftDeleteQuerySet.as_manager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['email'], condition=Q(is_deleted=False), name='uniq_live_user_email'
            ),
        ]

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class Address(TimestampedModel):
    """A postal address owned by a user or a lab (polymorphic owner)."""
    address_line1 = models.CharField(max_length=255)
    address_line2 = models.CharField(max_length=255, blank=True, default='')
    landmark = models.CharField(max_length=255, blank=True, default='')
    city = models.CharField(max_length=128)
    state = models.CharField(max_length=128, blank=True, default='')
    country = models.CharField(max_length=128, blank=True, default='')
    postal_code = models.CharField(max_length=20, blank=True, default='')
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    entity_id = models.UUIDField()
    entity_type = models.CharField(max_length=10, choices=EntityType.choices)

    class Meta:
        indexes = [models.Index(fields=['entity_type', 'entity_id'], name='address_owner_idx')]

    def __str__(self) -> str:
        return f"{self.address_line1}, {self.city} [{self.entity_type}]"


class Lab(TimestampedModel):
    name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=20)
    email = models.EmailField(max_length=254)
    is_deleted = models.BooleanField(default=False, db_index=True)

    objects = ActiveManager()
    all_objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['name'], condition=Q(is_deleted=False), name='uniq_live_lab_name'),
            models.UniqueConstraint(fields=['email'], condition=Q(is_deleted=False), name='uniq_live_lab_email'),
            models.UniqueConstraint(
                fields=['phone_number'], condition=Q(is_deleted=False), name='uniq_live_lab_phone'
            ),
        ]

    def __str__(self) -> str:
        return self.name


class LabManager(models.Model):
    """Grants a Manager-role user administrative rights over a lab."""
    lab = models.ForeignKey(Lab, on_delete=models.CASCADE, related_name='manager_links')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='lab_links')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['lab', 'user'], name='uniq_lab_manager'),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} manages {self.lab_id}"


class TestCatalog(TimestampedModel):
    test_name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    price = models.DecimalField(max_digits=10, decimal_places=2)
    is_deleted = models.BooleanField(default=False, db_index=True)

    objects = ActiveManager()
    all_objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['test_name'], condition=Q(is_deleted=False), name='uniq_live_catalog_name'
            ),
        ]

    def __str__(self) -> str:
        return self.test_name


class LabTest(TimestampedModel):
    """A lab's priced offering of a catalog entry."""
    lab = models.ForeignKey(Lab, on_delete=models.CASCADE, related_name='lab_tests')
    catalog = models.ForeignKey(TestCatalog, on_delete=models.CASCADE, related_name='lab_tests')
    price = models.DecimalField(max_digits=10, decimal_places=2)
    is_deleted = models.BooleanField(default=False, db_index=True)

    objects = ActiveManager()
    all_objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['lab', 'catalog'], condition=Q(is_deleted=False), name='uniq_live_lab_test'
            ),
        ]

    def __str__(self) -> str:
        return f"{self.catalog_id}@{self.lab_id}"


class TestOrder(TimestampedModel):
    """A client's request for one or more catalog tests at a lab."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='test_orders')
    lab = models.ForeignKey(Lab, on_delete=models.PROTECT, related_name='test_orders')
    status = models.CharField(
        max_length=20, choices=TestStatus.choices, default=TestStatus.PENDING, db_index=True
    )

    def __str__(self) -> str:
        return f"order {self.id} ({self.status})"


class TestDetail(models.Model):
    order = models.ForeignKey(TestOrder, on_delete=models.CASCADE, related_name='details')
    catalog = models.ForeignKey(TestCatalog, on_delete=models.PROTECT, related_name='order_details')
    remark = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.catalog_id} in {self.order_id}"
