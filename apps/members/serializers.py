from rest_framework import serializers
from .models import Member


class MemberSerializer(serializers.ModelSerializer):
    """Member directory entry."""

    mahalId = serializers.CharField(source='mahal_id', read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)

    class Meta:
        model = Member
        fields = [
            'id',
            'mahalId',
            'name',
            'address',
            'phone',
            'isActive',
        ]
        read_only_fields = fields
