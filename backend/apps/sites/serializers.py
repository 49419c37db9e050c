# apps/sites/serializers.py

from rest_framework import serializers

from .models import Site


class SiteSerializer(serializers.ModelSerializer):
    """Full site serializer, snapshot excluded."""

    matched_requirement_name = serializers.CharField(source="matched_requirement.name", read_only=True, default=None)

    class Meta:
        model = Site
        fields = [
            "id",
            "domain",
            "title",
            "status",
            "crawl_attempts",
            "crawl_started_at",
            "crawl_finished_at",
            "last_crawl_error",
            "page_count",
            "word_count",
            "detected_platform",
            "is_qualified",
            "matched_requirement",
            "matched_requirement_name",
            "match_details",
            "evaluated_at",
            "email_template",
            "send_account",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id", "title", "status", "crawl_attempts", "crawl_started_at", "crawl_finished_at",
            "last_crawl_error", "page_count", "word_count", "detected_platform", "is_qualified",
            "matched_requirement", "match_details", "evaluated_at", "created_at", "updated_at",
        ]


class SiteListSerializer(serializers.ModelSerializer):
    """Lighter serializer for list views."""

    contacts_count = serializers.SerializerMethodField()

    class Meta:
        model = Site
        fields = [
            "id",
            "domain",
            "status",
            "page_count",
            "detected_platform",
            "is_qualified",
            "contacts_count",
            "created_at",
        ]

    def get_contacts_count(self, obj):
        return obj.contacts.count()


class IngestDomainsSerializer(serializers.Serializer):
    domains = serializers.ListField(child=serializers.CharField(max_length=2048), allow_empty=False)
