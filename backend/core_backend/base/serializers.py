from rest_framework import serializers


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Model serializer whose Meta may list ``select_related_fields`` and
    ``prefetch_related_fields`` for OptimizedQuerysetMixin.
    """

    class Meta:
        select_related_fields = []
        prefetch_related_fields = []


class TimestampedSerializer(BaseModelSerializer):
    """For records carrying created_at/updated_at, which clients never write."""

    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)
