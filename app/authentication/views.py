"""
Authentication views.

Token issuance and refresh use rest_framework_simplejwt's views directly
(see urls.py); this module adds the current-user endpoint.
"""

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import UserSerializer


class CurrentUserView(APIView):
    """
    API view returning the authenticated participant.

    URL: /api/v1/auth/me/

    The chat client uses the returned id to tell its own messages apart
    from the other participant's.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="auth_me_retrieve",
        summary="Get current user",
        description="Retrieve the currently authenticated user's details.",
        tags=["Auth - User"],
        responses={200: UserSerializer},
    )
    def get(self, request):
        serializer = UserSerializer(request.user)
        return Response(serializer.data)
