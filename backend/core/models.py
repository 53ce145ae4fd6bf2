"""
Core app models.

Provides the abstract timestamp base used by every app plus the
``SystemSettings`` singleton that drives complaint auto-routing.
"""

from django.db import models


class TimeStampedModel(models.Model):
    """
    Abstract base model that provides self-updating ``created_at`` and
    ``updated_at`` timestamp fields for every concrete child model.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        abstract = True


class SystemSettings(TimeStampedModel):
    """
    Singleton row (``pk=1``) holding system-wide routing configuration.

    When ``auto_routing_enabled`` is set and ``auto_routing_departments``
    is non-empty, new complaints are routed to a random active department
    from that list.  Otherwise ``default_department`` is used (if active),
    falling back to the first active department.
    """

    SINGLETON_PK = 1

    auto_routing_enabled = models.BooleanField(
        default=False,
        verbose_name="Auto-routing Enabled",
    )
    auto_routing_departments = models.ManyToManyField(
        "departments.Department",
        blank=True,
        related_name="+",
        verbose_name="Auto-routing Departments",
    )
    default_department = models.ForeignKey(
        "departments.Department",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name="Default Department",
    )

    class Meta:
        verbose_name = "System Settings"
        verbose_name_plural = "System Settings"

    def __str__(self):
        return "System Settings"

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        super().save(*args, **kwargs)

    @classmethod
    def load(cls) -> "SystemSettings":
        """Return the singleton, creating it with defaults on first access."""
        obj, _ = cls.objects.get_or_create(pk=cls.SINGLETON_PK)
        return obj
