# apps/blocklist/views.py

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.common.enums import BlockSource, BlockType

from . import services
from .models import BlockEntry
from .serializers import BlockEntrySerializer, BulkBlockSerializer, CheckRecipientSerializer, ComplaintSerializer


class BlockEntryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = BlockEntry.objects.all().order_by("-created_at")
    serializer_class = BlockEntrySerializer

    def perform_create(self, serializer):
        data = serializer.validated_data
        block = services.block_email if data["type"] == BlockType.EMAIL else services.block_domain
        serializer.instance = block(data["value"], reason=data.get("reason", ""), source=BlockSource.MANUAL)

    def perform_destroy(self, instance):
        services.unblock(instance.type, instance.value)

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        entry = self.get_object()
        entry = services.set_active(entry, not entry.is_active)
        return Response(BlockEntrySerializer(entry).data)

    @action(detail=False, methods=["post"])
    def bulk(self, request):
        serializer = BulkBlockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = services.bulk_block(data["type"], data["values"], reason=data["reason"])
        return Response(result, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def check(self, request):
        serializer = CheckRecipientSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.check_recipient(
            serializer.validated_data["email"],
            site_domain=serializer.validated_data.get("site_domain") or None,
        )
        return Response({"blocked": result.blocked, "reasons": result.reasons})

    @action(detail=False, methods=["post"])
    def complaint(self, request):
        serializer = ComplaintSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = services.auto_block_from_complaint(serializer.validated_data["email"])
        return Response(BlockEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(services.get_statistics())
