# apps/blocklist/serializers.py

from rest_framework import serializers

from apps.common.enums import BlockType

from .models import BlockEntry


class BlockEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = BlockEntry
        fields = ["id", "type", "value", "reason", "source", "is_active", "created_at"]
        read_only_fields = ["id", "source", "created_at"]


class BulkBlockSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=BlockType.choices)
    values = serializers.ListField(child=serializers.CharField(max_length=255), allow_empty=False)
    reason = serializers.CharField(required=False, allow_blank=True, default="Imported")


class CheckRecipientSerializer(serializers.Serializer):
    email = serializers.EmailField()
    site_domain = serializers.CharField(required=False, allow_blank=True)


class ComplaintSerializer(serializers.Serializer):
    email = serializers.EmailField()
