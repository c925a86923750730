"""
Serializers for authentication models.

Only the public, read-only user summary lives here. It is embedded in
message and conversation responses so clients can render the other
participant without a second request.

Related files:
    - models.py: User and Profile
    - messaging/serializers.py: Nests UserSummarySerializer
"""

from rest_framework import serializers

from authentication.models import User


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Public user representation.

    Name and avatar come from the profile. A missing profile renders as
    empty strings rather than failing the whole response.
    """

    first_name = serializers.SerializerMethodField()
    last_name = serializers.SerializerMethodField()
    full_name = serializers.SerializerMethodField()
    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "avatar_url",
        ]
        read_only_fields = fields

    def _profile_value(self, obj, attr):
        profile = getattr(obj, "profile", None)
        return getattr(profile, attr, "") if profile is not None else ""

    def get_first_name(self, obj):
        return self._profile_value(obj, "first_name")

    def get_last_name(self, obj):
        return self._profile_value(obj, "last_name")

    def get_full_name(self, obj):
        return self._profile_value(obj, "full_name")

    def get_avatar_url(self, obj):
        return self._profile_value(obj, "avatar_url") or None
