from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from innogram.chats import services

from .serializers import MessagePageQuerySerializer
from .serializers import MessageSerializer


class ChatMessagesView(APIView):
    """Cursor-paginated history of a chat, oldest first within a page."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter("limit", int, required=False),
            OpenApiParameter("cursor", int, required=False),
        ],
        responses=MessageSerializer(many=True),
    )
    def get(self, request, chat_id: int):
        query = MessagePageQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        page = services.get_messages(
            chat_id=chat_id,
            user_id=request.user.id,
            limit=query.validated_data["limit"],
            cursor=query.validated_data["cursor"],
        )
        return Response(
            {
                "messages": MessageSerializer(page.messages, many=True).data,
                "hasMore": page.has_more,
                "nextCursor": page.next_cursor,
            },
        )
