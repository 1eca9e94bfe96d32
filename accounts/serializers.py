from rest_framework import serializers
from django.contrib.auth import authenticate, get_user_model
from .models import Role
from exceptions.handlers import InvalidInputException
from utils.constants import UserMessage

User = get_user_model()


class RoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Role
        fields = ["id", "name", "description"]


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for user profile data display.
    """
    role = RoleSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "mobile_number",
            "first_name",
            "last_name",
            "role",
            "is_active",
            "created_at",
            "last_login",
        ]
        read_only_fields = fields


class LoginSerializer(serializers.Serializer):
    """
    Serializer for user authentication and login validation.

    Authenticates the credentials with Django's authenticate() and
    rejects inactive accounts.
    """

    username = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        """
        Validates user authentication credentials.

        Returns:
            dict: Validated data with authenticated user object

        Raises:
            InvalidInputException: For authentication failures
        """
        user = authenticate(username=data.get("username"), password=data.get("password"))
        if not user or not user.is_active:
            raise InvalidInputException(UserMessage.INVALID_CREDENTIALS)
        data["user"] = user
        return data
