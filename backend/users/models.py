from django.db import models


class Employee(models.Model):
    """
    Staff member who takes orders. Discounts may be restricted by `role`.
    """

    class Role(models.IntegerChoices):
        ADMIN = 1, "Admin"
        CASHIER = 2, "Cashier"
        WAREHOUSE_STAFF = 3, "Warehouse Staff"

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        ON_LEAVE = "ON_LEAVE", "On Leave"
        TERMINATED = "TERMINATED", "Terminated"

    name = models.CharField(max_length=200)
    email = models.EmailField(unique=True, null=True, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    role = models.PositiveSmallIntegerField(choices=Role.choices, default=Role.CASHIER)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    hire_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.get_role_display()})"
