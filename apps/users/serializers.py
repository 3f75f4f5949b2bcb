"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import Company

User = get_user_model()


class CompanyShortSerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = ["id", "name", "organization_number", "city"]


class UserSerializer(serializers.ModelSerializer):
    company = CompanyShortSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "phone",
            "role",
            "company",
            "created_at",
        ]
        read_only_fields = fields
