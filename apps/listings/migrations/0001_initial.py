import decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import apps.listings.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="VehicleListing",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.TextField(blank=True)),
                (
                    "daily_rate",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                    ),
                ),
                ("currency", models.CharField(default=apps.listings.models._default_currency, max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("active", "Active"), ("inactive", "Inactive")],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=255)),
                ("registration_number", models.CharField(blank=True, max_length=20)),
                ("vehicle_type", models.CharField(blank=True, max_length=50)),
                ("capacity", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vehiclelistings",
                        to="users.company",
                    ),
                ),
            ],
            options={
                "verbose_name": "Vehicle listing",
                "verbose_name_plural": "Vehicle listings",
                "ordering": ["title"],
                "indexes": [
                    models.Index(fields=["company", "status"], name="vehicle_company_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DriverListing",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.TextField(blank=True)),
                (
                    "daily_rate",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                    ),
                ),
                ("currency", models.CharField(default=apps.listings.models._default_currency, max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("active", "Active"), ("inactive", "Inactive")],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("license_class", models.CharField(blank=True, max_length=20)),
                ("languages", models.JSONField(blank=True, default=list)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="driverlistings",
                        to="users.company",
                    ),
                ),
            ],
            options={
                "verbose_name": "Driver listing",
                "verbose_name_plural": "Driver listings",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["company", "status"], name="driver_company_status_idx"),
                ],
            },
        ),
    ]
