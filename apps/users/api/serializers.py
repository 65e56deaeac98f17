"""Serializers for the user management API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.models import CustomUser

DUPLICATE_EMAIL = "Email already in use"


def _email_taken(value: str, exclude_pk=None) -> bool:
    qs = CustomUser.objects.filter(email__iexact=value)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


class UserCreateSerializer(serializers.ModelSerializer):
    """Admin-side account creation. The role defaults to agent."""

    # declared explicitly so the model's unique validator does not answer first
    email = serializers.EmailField()
    name = serializers.CharField(max_length=150)
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        min_length=8,
    )
    role = serializers.ChoiceField(choices=CustomUser.RoleChoices.choices, required=False)

    class Meta:
        model = CustomUser
        fields = ["name", "email", "password", "role"]

    def validate_email(self, value: str) -> str:
        if _email_taken(value):
            raise serializers.ValidationError(DUPLICATE_EMAIL)
        return value

    def create(self, validated_data: dict) -> CustomUser:  # type: ignore
        return CustomUser.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data["name"],
            role=validated_data.get("role") or CustomUser.RoleChoices.AGENT,
        )


class UserUpdateSerializer(serializers.ModelSerializer):
    """
    Partial account update

    The role is only applied when the view passes allow_role_change=True in
    the context; otherwise it is dropped silently.
    """

    email = serializers.EmailField(required=False)
    name = serializers.CharField(max_length=150, required=False)
    password = serializers.CharField(
        write_only=True,
        required=False,
        style={"input_type": "password"},
        min_length=8,
    )
    role = serializers.ChoiceField(choices=CustomUser.RoleChoices.choices, required=False)

    class Meta:
        model = CustomUser
        fields = ["name", "email", "password", "role"]

    def validate_email(self, value: str) -> str:
        if _email_taken(value, exclude_pk=getattr(self.instance, "pk", None)):
            raise serializers.ValidationError(DUPLICATE_EMAIL)
        return value

    def update(self, instance: CustomUser, validated_data: dict) -> CustomUser:  # type: ignore
        if not self.context.get("allow_role_change"):
            validated_data.pop("role", None)
        password = validated_data.pop("password", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance
