from django.core.management.base import BaseCommand
from users.models import Role, ROLE_ADMIN, ROLE_MEDICAL_OFFICER, ROLE_USER

class Command(BaseCommand):
    help = 'Create default roles for the application'

    def handle(self, *args, **options):
        # Define default roles with descriptions
        default_roles = [
            {'name': ROLE_ADMIN, 'description': 'Administrator who moderates content and manages accounts'},
            {'name': ROLE_MEDICAL_OFFICER, 'description': 'Medical professional who writes articles and answers chats'},
            {'name': ROLE_USER, 'description': 'Community member signed in through Firebase'},
        ]

        roles_created = 0
        roles_existed = 0

        for role_data in default_roles:
            role, created = Role.objects.get_or_create(
                name=role_data['name'],
                defaults={'description': role_data['description']}
            )

            if created:
                roles_created += 1
                self.stdout.write(self.style.SUCCESS(f"Created role: {role.name}"))
            else:
                roles_existed += 1
                self.stdout.write(self.style.WARNING(f"Role already exists: {role.name}"))

        self.stdout.write(self.style.SUCCESS(f"Created {roles_created} new roles, {roles_existed} already existed."))
