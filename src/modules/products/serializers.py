"""Product DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import PRODUCT_NAME_MAX_LENGTH, Product


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "stock_quantity",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductWriteSerializer(serializers.Serializer):
    """Input for create (all required fields) and update (``partial=True``)."""

    name = serializers.CharField(max_length=PRODUCT_NAME_MAX_LENGTH)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    stock_quantity = serializers.IntegerField(min_value=0, required=False)
    is_active = serializers.BooleanField(required=False)
