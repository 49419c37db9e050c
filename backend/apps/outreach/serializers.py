# apps/outreach/serializers.py

from rest_framework import serializers

from .models import ReviewItem, SendAccount


class ReviewItemSerializer(serializers.ModelSerializer):
    """Full review item with the rendered message."""

    domain = serializers.CharField(source="site.domain", read_only=True)
    contact_email = serializers.CharField(source="contact.email", read_only=True)
    contact_name = serializers.CharField(source="contact.name", read_only=True)
    template_name = serializers.CharField(source="template.name", read_only=True)
    reviewed_by = serializers.StringRelatedField(read_only=True)

    class Meta:
        model = ReviewItem
        fields = [
            "id",
            "site",
            "domain",
            "contact",
            "contact_email",
            "contact_name",
            "template",
            "template_name",
            "send_account",
            "subject",
            "body",
            "preheader",
            "status",
            "priority",
            "reviewed_by",
            "reviewed_at",
            "review_notes",
            "send_attempts",
            "failure_reason",
            "sent_at",
            "created_at",
        ]
        read_only_fields = fields


class ReviewItemListSerializer(serializers.ModelSerializer):
    """Lighter serializer for the queue listing."""

    domain = serializers.CharField(source="site.domain", read_only=True)
    contact_email = serializers.CharField(source="contact.email", read_only=True)

    class Meta:
        model = ReviewItem
        fields = ["id", "domain", "contact_email", "subject", "status", "priority", "created_at"]


class ReviewDecisionSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)
    subject = serializers.CharField(required=False, max_length=500)
    body = serializers.CharField(required=False)
    preheader = serializers.CharField(required=False, allow_blank=True, max_length=255)


class BulkDecisionSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class SendAccountSerializer(serializers.ModelSerializer):
    success_rate = serializers.FloatField(read_only=True)

    class Meta:
        model = SendAccount
        fields = [
            "id",
            "name",
            "host",
            "port",
            "use_tls",
            "username",
            "credentials_key",
            "from_address",
            "from_name",
            "daily_limit",
            "hourly_limit",
            "emails_sent_today",
            "emails_sent_this_hour",
            "priority",
            "is_active",
            "success_count",
            "failure_count",
            "success_rate",
            "last_used_at",
        ]
        read_only_fields = [
            "id", "emails_sent_today", "emails_sent_this_hour", "success_count",
            "failure_count", "last_used_at",
        ]
