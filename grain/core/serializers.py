from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import User, UserSettings, AuditLog
from .validators import validate_image_data


class UserSerializer(serializers.ModelSerializer):
    image_data = serializers.CharField(required=False, allow_blank=True, allow_null=True, validators=[validate_image_data])

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'date_of_birth',
                  'has_accepted_terms', 'image_data', 'is_deleted', 'is_staff',
                  'created_at', 'updated_at']
        read_only_fields = ['username', 'is_deleted', 'is_staff', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True)
    password_confirm = serializers.CharField(write_only=True, required=False)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    image_data = serializers.CharField(required=False, allow_blank=True, allow_null=True, validators=[validate_image_data])

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name',
                  'date_of_birth', 'has_accepted_terms', 'image_data']

    def validate_has_accepted_terms(self, value):
        if not value:
            raise serializers.ValidationError('You must accept the terms and conditions to register.')
        return value

    def validate(self, attrs):
        password_confirm = attrs.pop('password_confirm', None)
        if password_confirm is not None and attrs['password'] != password_confirm:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        candidate = User(
            username=attrs.get('username'),
            email=attrs.get('email', ''),
            first_name=attrs.get('first_name', ''),
            last_name=attrs.get('last_name', ''),
        )
        validate_password(attrs['password'], user=candidate)
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        UserSettings.objects.get_or_create(user=user)
        return user


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError('Current password is incorrect.')
        return value

    def validate(self, attrs):
        validate_password(attrs['new_password'], user=self.context['request'].user)
        return attrs


class UserSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserSettings
        fields = ['id', 'user', 'currency', 'language', 'theme_mode', 'created_at', 'updated_at']
        read_only_fields = ['user', 'created_at', 'updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'username', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']
