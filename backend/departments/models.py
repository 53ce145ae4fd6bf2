"""
Departments app models.

A ``Department`` is the routing unit for complaints: every new
complaint lands in exactly one department and is handed to that
department's manager.
"""

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class Department(TimeStampedModel):
    """
    Organisational unit that owns complaints.

    ``manager`` must reference an active manager-role user for
    auto-routing to succeed.  ``default_assignee`` is who receives a
    complaint when an admin (re)assigns it to this department; it starts
    out equal to the manager.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name="Name",
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name="Description",
    )
    manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="managed_departments",
        verbose_name="Manager",
    )
    default_assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="default_assignee_departments",
        verbose_name="Default Assignee",
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        verbose_name="Active",
    )

    class Meta:
        verbose_name = "Department"
        verbose_name_plural = "Departments"
        ordering = ["name"]

    def __str__(self):
        return self.name
