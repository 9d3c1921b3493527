"""
Views for chat API.

This module provides REST API endpoints for the chat system:
- ConversationViewSet: Conversation list, get-or-create, detail and read state
- ConversationMessageViewSet: Message history and sending (nested under conversation)
- MessageSendView: Sending with lazy conversation creation
- MessageReadView: Read receipt for one message

URL Structure:
    /api/v1/chat/conversations/                  GET, POST
    /api/v1/chat/conversations/{id}/             GET
    /api/v1/chat/conversations/{id}/read/        POST
    /api/v1/chat/conversations/{id}/messages/    GET, POST
    /api/v1/chat/messages/                       POST
    /api/v1/chat/messages/{id}/read/             POST

Design Decisions:
    - All operations use the service layer for business logic
    - The sender of every write is request.user
    - Failed service results are raised as core.exceptions errors by
      raise_for_failure(); api_exception_handler renders the envelope
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import (
    BaseApplicationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.services import ServiceResult

from chat.pagination import MessageCursorPagination
from chat.serializers import (
    ConversationCreateSerializer,
    ConversationSerializer,
    ConversationSummarySerializer,
    MessageCreateSerializer,
    MessageSendSerializer,
    MessageSerializer,
)
from chat.services import ConversationService, MessageService

EXCEPTION_BY_ERROR_CODE: dict[str, type[BaseApplicationError]] = {
    "NOT_PARTICIPANT": PermissionDeniedError,
    "NOT_RECIPIENT": PermissionDeniedError,
    "CONVERSATION_NOT_FOUND": NotFoundError,
    "MESSAGE_NOT_FOUND": NotFoundError,
    "LISTING_NOT_FOUND": NotFoundError,
    "USER_NOT_FOUND": NotFoundError,
}


def raise_for_failure(result: ServiceResult) -> None:
    """
    Raise the application error for a failed service result.

    Codes without an entry in EXCEPTION_BY_ERROR_CODE raise ValidationError (400).
    """
    if result.success:
        return
    error_class = EXCEPTION_BY_ERROR_CODE.get(result.error_code, ValidationError)
    raise error_class(result.error, error_code=result.error_code, details=result.errors)


ERROR_RESPONSES = {
    400: OpenApiResponse(description="Validation failed (see error_code)"),
    403: OpenApiResponse(description="Not a participant / not the recipient"),
    404: OpenApiResponse(description="Conversation, message, listing or user not found"),
    503: OpenApiResponse(description="Store unavailable, retry later"),
}


@extend_schema_view(
    list=extend_schema(
        operation_id="list_conversations",
        summary="List conversations",
        description=(
            "Conversations of the current user, most recently active first, "
            "with the other participant, listing, last message and unread count."
        ),
        responses={200: ConversationSummarySerializer(many=True)},
        tags=["Chat - Conversations"],
    ),
    create=extend_schema(
        operation_id="get_or_create_conversation",
        summary="Get or create conversation",
        description=(
            "Return the conversation with the recipient about the listing, "
            "creating it if needed. 201 when created, 200 when it already existed."
        ),
        request=ConversationCreateSerializer,
        responses={
            200: ConversationSerializer,
            201: ConversationSerializer,
            **ERROR_RESPONSES,
        },
        tags=["Chat - Conversations"],
    ),
    retrieve=extend_schema(
        operation_id="get_conversation",
        summary="Get conversation",
        responses={200: ConversationSerializer, **ERROR_RESPONSES},
        tags=["Chat - Conversations"],
    ),
)
class ConversationViewSet(viewsets.GenericViewSet):
    """
    ViewSet for conversation operations.

    list:
        Conversation summaries for the current user.

    create:
        Get or create the conversation with another participant about a listing.

    retrieve:
        Conversation details (members only).

    read:
        Mark every message addressed to the current user as read.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = ConversationSerializer
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):
        if self.action == "list":
            return ConversationSummarySerializer
        if self.action == "create":
            return ConversationCreateSerializer
        return ConversationSerializer

    def list(self, request):
        summaries = ConversationService.list_summaries(request.user)
        return Response(ConversationSummarySerializer(summaries, many=True).data)

    def create(self, request):
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ConversationService.get_or_create(
            sender=request.user,
            other=serializer.validated_data["recipient_id"],
            listing=serializer.validated_data["listing_id"],
        )
        raise_for_failure(result)

        conversation, created = result.data
        output_serializer = ConversationSerializer(
            conversation, context={"request": request}
        )
        return Response(
            output_serializer.data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def retrieve(self, request, pk=None):
        result = ConversationService.get_for_participant(pk, request.user)
        raise_for_failure(result)

        serializer = ConversationSerializer(result.data, context={"request": request})
        return Response(serializer.data)

    @extend_schema(
        operation_id="mark_conversation_read",
        summary="Mark conversation as read",
        request=None,
        responses={200: OpenApiResponse(description="{'marked_read': <count>}"), **ERROR_RESPONSES},
        tags=["Chat - Conversations"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        result = ConversationService.get_for_participant(pk, request.user)
        raise_for_failure(result)

        result = MessageService.mark_conversation_read(result.data, request.user)
        raise_for_failure(result)

        return Response({"marked_read": result.data})


@extend_schema_view(
    list=extend_schema(
        operation_id="list_messages",
        summary="List messages",
        description="Message history, oldest first, cursor paginated.",
        responses={200: MessageSerializer(many=True), **ERROR_RESPONSES},
        tags=["Chat - Messages"],
    ),
    create=extend_schema(
        operation_id="send_message",
        summary="Send message",
        request=MessageCreateSerializer,
        responses={201: MessageSerializer, **ERROR_RESPONSES},
        tags=["Chat - Messages"],
    ),
)
class ConversationMessageViewSet(viewsets.GenericViewSet):
    """
    ViewSet for messages within a conversation.

    list:
        Get all messages in the conversation (members only).
        Uses cursor pagination, oldest first.

    create:
        Send a message to the conversation.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = MessageSerializer
    pagination_class = MessageCursorPagination

    def get_serializer_class(self):
        if self.action == "create":
            return MessageCreateSerializer
        return MessageSerializer

    def list(self, request, conversation_pk=None):
        result = ConversationService.get_for_participant(conversation_pk, request.user)
        raise_for_failure(result)

        result = MessageService.list_for(result.data, request.user)
        raise_for_failure(result)

        page = self.paginate_queryset(result.data)
        serializer = MessageSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request, conversation_pk=None):
        result = ConversationService.get_for_participant(conversation_pk, request.user)
        raise_for_failure(result)

        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = MessageService.send(
            conversation=result.data,
            sender=request.user,
            content=serializer.validated_data["content"],
        )
        raise_for_failure(result)

        return Response(MessageSerializer(result.data).data, status=status.HTTP_201_CREATED)


class MessageSendView(APIView):
    """
    Send a message, creating the conversation on the first send.

    URL: /api/v1/chat/messages/

    Body:
        {"content": "...", "conversation_id": 12}
        {"content": "...", "recipient_id": 3, "listing_id": 7}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="send_message_lazy",
        summary="Send message (lazy conversation)",
        description=(
            "Send to an existing conversation, or to a recipient about a listing. "
            "The conversation is created by the first message; an invalid "
            "message never creates one."
        ),
        request=MessageSendSerializer,
        responses={201: MessageSerializer, **ERROR_RESPONSES},
        tags=["Chat - Messages"],
    )
    def post(self, request):
        serializer = MessageSendSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = MessageService.send_lazy(
            sender=request.user,
            ref=serializer.to_ref(),
            content=serializer.validated_data["content"],
        )
        raise_for_failure(result)

        return Response(MessageSerializer(result.data).data, status=status.HTTP_201_CREATED)


class MessageReadView(APIView):
    """
    Mark a message as read.

    URL: /api/v1/chat/messages/{id}/read/

    Only the recipient may mark a message read; repeating the call is a no-op.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="mark_message_read",
        summary="Mark message as read",
        request=None,
        responses={200: MessageSerializer, **ERROR_RESPONSES},
        tags=["Chat - Messages"],
    )
    def post(self, request, pk):
        result = MessageService.mark_read(pk, request.user).map(
            lambda message: MessageSerializer(message).data
        )
        raise_for_failure(result)

        return Response(result.data)
