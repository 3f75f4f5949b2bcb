import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AvailabilityBlock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "listing_type",
                    models.CharField(choices=[("vehicle", "Vehicle"), ("driver", "Driver")], max_length=10),
                ),
                ("listing_id", models.PositiveBigIntegerField()),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability_blocks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Availability block",
                "verbose_name_plural": "Availability blocks",
                "ordering": ["start_date", "id"],
                "indexes": [
                    models.Index(
                        fields=["listing_type", "listing_id", "start_date", "end_date"],
                        name="avail_block_listing_dates_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("start_date__lte", models.F("end_date"))),
                        name="availability_block_dates_ordered",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RecurringBlockPattern",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "listing_type",
                    models.CharField(choices=[("vehicle", "Vehicle"), ("driver", "Driver")], max_length=10),
                ),
                ("listing_id", models.PositiveBigIntegerField()),
                ("days_of_week", models.JSONField(default=list)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(blank=True, help_text="Empty means open-ended.", null=True)),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="recurring_block_patterns",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "split_from",
                    models.ForeignKey(
                        blank=True,
                        help_text="Pattern this one continues after a future-scoped change.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="successors",
                        to="availability.recurringblockpattern",
                    ),
                ),
            ],
            options={
                "verbose_name": "Recurring block pattern",
                "verbose_name_plural": "Recurring block patterns",
                "ordering": ["start_date", "id"],
                "indexes": [
                    models.Index(
                        fields=["listing_type", "listing_id", "start_date"],
                        name="recurring_listing_start_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("end_date__isnull", True),
                            ("start_date__lte", models.F("end_date")),
                            _connector="OR",
                        ),
                        name="recurring_pattern_dates_ordered",
                    ),
                ],
            },
        ),
    ]
