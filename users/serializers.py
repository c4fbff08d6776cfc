from rest_framework import serializers
from .models import User, Role


class RoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Role
        fields = ['id', 'name', 'description']


class UserSerializer(serializers.ModelSerializer):
    roles = RoleSerializer(many=True, read_only=True)
    display_name = serializers.CharField(read_only=True)
    uid = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'uid', 'email', 'name', 'display_name', 'phone_number', 'photo_url',
            'firebase_uid', 'roles', 'is_active', 'date_joined', 'last_login'
        ]
        read_only_fields = ['id', 'firebase_uid', 'roles', 'date_joined', 'last_login']


class AdminSerializer(serializers.ModelSerializer):
    role = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'role', 'last_login']
        read_only_fields = fields

    def get_role(self, obj):
        return 'superadmin' if obj.is_superuser else 'admin'


class AdminRegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6, style={'input_type': 'password'})
    name = serializers.CharField(max_length=150)

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('Admin with this email already exists')
        return value


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(
        error_messages={'required': 'Email and password are required', 'blank': 'Email and password are required'}
    )
    password = serializers.CharField(
        style={'input_type': 'password'},
        error_messages={'required': 'Email and password are required', 'blank': 'Email and password are required'}
    )


class EndUserUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    display_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    photo_url = serializers.URLField(required=False, allow_blank=True, max_length=500)
