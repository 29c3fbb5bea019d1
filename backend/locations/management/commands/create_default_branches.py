from django.core.management.base import BaseCommand
from backend.locations.models import Branch

DEFAULT_BRANCHES = [
    {
        'name': 'حلب',
        'location': 'حلب، سوريا',
        'phone': '+963-21-1234567',
        'manager_name': 'مدير فرع حلب',
        'manager_phone': '+963-21-1234567',
        'notes': 'الفرع الرئيسي في حلب',
    },
    {
        'name': 'اللاذقية',
        'location': 'اللاذقية، سوريا',
        'phone': '+963-41-1234567',
        'manager_name': 'مدير فرع اللاذقية',
        'manager_phone': '+963-41-1234567',
        'notes': 'فرع اللاذقية',
    },
    {
        'name': 'دمشق',
        'location': 'دمشق، سوريا',
        'phone': '+963-11-1234567',
        'manager_name': 'مدير فرع دمشق',
        'manager_phone': '+963-11-1234567',
        'notes': 'فرع دمشق',
    },
    {
        'name': 'حمص',
        'location': 'حمص، سوريا',
        'phone': '+963-31-1234567',
        'manager_name': 'مدير فرع حمص',
        'manager_phone': '+963-31-1234567',
        'notes': 'فرع حمص',
    },
]


def create_default_branches():
    """Create the default branch set when the table is empty; returns created branches"""
    if Branch.objects.exists():
        return []
    return [Branch.objects.create(status='active', **data) for data in DEFAULT_BRANCHES]


class Command(BaseCommand):
    help = 'Create the default branches (Aleppo, Latakia, Damascus, Homs) when no branch exists'

    def handle(self, *args, **options):
        created = create_default_branches()
        if not created:
            self.stdout.write(self.style.WARNING('Branches already exist, nothing to do'))
            return
        for branch in created:
            self.stdout.write(self.style.SUCCESS(f'Created branch: {branch.name}'))
        self.stdout.write(self.style.SUCCESS(f'\nCreated {len(created)} default branches'))
