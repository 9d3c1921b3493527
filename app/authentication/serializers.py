"""
Serializers for authentication models.

Related files:
    - models.py: User and Profile models
    - views.py: CurrentUserView
    - chat/serializers.py: Embeds UserSerializer for participants
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for User model (read operations).

    Used for the /api/v1/auth/me/ endpoint and for embedding participant
    identity in chat responses.
    """

    full_name = serializers.SerializerMethodField()
    username = serializers.CharField(source="profile.username", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "full_name",
            "username",
            "date_joined",
        ]
        read_only_fields = fields

    def get_full_name(self, obj):
        """Return the user's full name from profile."""
        return obj.get_full_name()


class ParticipantSerializer(serializers.ModelSerializer):
    """
    Minimal public identity of a chat participant.

    Omits the email address so the other side of a conversation only
    sees a display name.
    """

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "display_name"]
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_full_name()
