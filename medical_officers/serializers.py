from django.db import transaction
from rest_framework import serializers

from users.models import User, ROLE_MEDICAL_OFFICER
from .models import MedicalOfficer


class MedicalOfficerSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(source='user.id', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    name = serializers.CharField(read_only=True)
    phone_number = serializers.CharField(source='user.phone_number', read_only=True)
    is_active = serializers.BooleanField(source='user.is_active', read_only=True)
    last_login = serializers.DateTimeField(source='user.last_login', read_only=True)

    class Meta:
        model = MedicalOfficer
        fields = [
            'id', 'user_id', 'email', 'name', 'specialization', 'license_number',
            'phone_number', 'hospital', 'is_approved', 'is_active', 'last_login',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class MedicalOfficerRegisterSerializer(serializers.Serializer):
    email = serializers.EmailField(help_text="Login email")
    password = serializers.CharField(
        write_only=True, min_length=6, style={'input_type': 'password'},
        error_messages={'min_length': 'Password must be at least 6 characters long'}
    )
    name = serializers.CharField(max_length=150)
    specialization = serializers.ChoiceField(choices=MedicalOfficer.SPECIALIZATION_CHOICES)
    license_number = serializers.CharField(max_length=50, help_text="Medical license number")
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    hospital = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('Medical officer with this email or license number already exists')
        return value

    def validate_license_number(self, value):
        value = value.strip()
        if MedicalOfficer.objects.filter(license_number=value).exists():
            raise serializers.ValidationError('Medical officer with this email or license number already exists')
        return value

    @transaction.atomic
    def create(self, validated_data):
        user = User.objects.create_user(
            username=validated_data['email'],
            email=validated_data['email'],
            password=validated_data['password'],
            name=validated_data['name'],
            phone_number=validated_data.get('phone_number', ''),
        )
        user.add_role(ROLE_MEDICAL_OFFICER)
        return MedicalOfficer.objects.create(
            user=user,
            specialization=validated_data['specialization'],
            license_number=validated_data['license_number'],
            hospital=validated_data.get('hospital', ''),
        )


class MedicalOfficerProfileUpdateSerializer(serializers.Serializer):
    """Fields an officer may change on their own profile."""
    name = serializers.CharField(max_length=150, required=False)
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    hospital = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def update(self, instance, validated_data):
        user = instance.user
        if validated_data.get('name'):
            user.name = validated_data['name']
        if 'phone_number' in validated_data:
            user.phone_number = validated_data['phone_number']
        user.save()
        if 'hospital' in validated_data:
            instance.hospital = validated_data['hospital']
        instance.save()
        return instance


class AdminMedicalOfficerUpdateSerializer(serializers.Serializer):
    """Fields an admin may change on any officer, approval included."""
    email = serializers.EmailField(required=False)
    name = serializers.CharField(max_length=150, required=False)
    specialization = serializers.ChoiceField(choices=MedicalOfficer.SPECIALIZATION_CHOICES, required=False)
    is_approved = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)

    def validate_email(self, value):
        value = value.strip().lower()
        others = User.objects.filter(email__iexact=value).exclude(pk=self.instance.user_id)
        if others.exists():
            raise serializers.ValidationError('Another account already uses this email')
        return value

    def update(self, instance, validated_data):
        user = instance.user
        for field in ('email', 'name', 'is_active'):
            if field in validated_data:
                setattr(user, field, validated_data[field])
        user.save()
        for field in ('specialization', 'is_approved'):
            if field in validated_data:
                setattr(instance, field, validated_data[field])
        instance.save()
        return instance
