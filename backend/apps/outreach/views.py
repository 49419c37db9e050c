# apps/outreach/views.py

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from . import review
from .accounts import get_account_stats
from .models import ReviewItem, SendAccount
from .serializers import (
    BulkDecisionSerializer, ReviewDecisionSerializer,
    ReviewItemListSerializer, ReviewItemSerializer, SendAccountSerializer,
)


class ReviewItemViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = ReviewItem.objects.select_related("site", "contact", "template", "reviewed_by")

    def get_serializer_class(self):
        if self.action == "list":
            return ReviewItemListSerializer
        return ReviewItemSerializer

    def get_queryset(self):
        qs = super().get_queryset().order_by("-priority", "created_at")
        item_status = self.request.query_params.get("status")
        if item_status:
            qs = qs.filter(status=item_status)
        return qs

    def _decision(self, request):
        serializer = ReviewDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        item = self.get_object()
        data = self._decision(request)
        modifications = {key: data[key] for key in review.EDITABLE_FIELDS if key in data}
        changed = review.approve(item, request.user, notes=data.get("notes"), modifications=modifications)
        return Response({"changed": changed, "item": ReviewItemSerializer(item).data})

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        item = self.get_object()
        data = self._decision(request)
        changed = review.reject(item, request.user, notes=data.get("notes"))
        return Response({"changed": changed, "item": ReviewItemSerializer(item).data})

    @action(detail=True, methods=["post"])
    def requeue(self, request, pk=None):
        item = self.get_object()
        if not review.requeue(item):
            return Response(
                {"error": f"Item is {item.status}, only rejected or failed items can be requeued"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(ReviewItemSerializer(item).data)

    @action(detail=False, methods=["post"], url_path="bulk-approve")
    def bulk_approve(self, request):
        serializer = BulkDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = review.bulk_approve(serializer.validated_data["ids"], request.user, serializer.validated_data.get("notes"))
        return Response({"approved": count})

    @action(detail=False, methods=["post"], url_path="bulk-reject")
    def bulk_reject(self, request):
        serializer = BulkDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = review.bulk_reject(serializer.validated_data["ids"], request.user, serializer.validated_data.get("notes"))
        return Response({"rejected": count})

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(review.get_statistics())


class SendAccountViewSet(viewsets.ModelViewSet):
    queryset = SendAccount.objects.all().order_by("priority", "name")
    serializer_class = SendAccountSerializer

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(get_account_stats())
