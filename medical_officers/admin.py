from django.contrib import admin
from .models import MedicalOfficer


@admin.register(MedicalOfficer)
class MedicalOfficerAdmin(admin.ModelAdmin):
    list_display = ('user', 'specialization', 'license_number', 'hospital', 'is_approved', 'created_at')
    list_filter = ('specialization', 'is_approved')
    search_fields = ('user__email', 'user__name', 'license_number', 'hospital')
    actions = ['approve_officers']

    def approve_officers(self, request, queryset):
        updated = queryset.update(is_approved=True)
        self.message_user(request, f"{updated} medical officer(s) approved.")
    approve_officers.short_description = 'Approve selected medical officers'
