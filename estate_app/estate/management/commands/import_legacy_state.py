from django.core.management.base import BaseCommand, CommandError

from ...models import Customer, Safe, Unit
from ...services.legacy import LegacyStateImporter, load_legacy_state


class Command(BaseCommand):
    help = 'يستورد بيانات النسخة القديمة من ملف JSON'

    def add_arguments(self, parser):
        parser.add_argument('path', help='مسار ملف الحالة القديم')
        parser.add_argument(
            '--force',
            action='store_true',
            help='الاستيراد حتى لو كانت قاعدة البيانات تحتوي على بيانات'
        )

    def handle(self, *args, **options):
        try:
            with open(options['path'], encoding='utf-8') as handle:
                state = load_legacy_state(handle.read())
        except OSError as exc:
            raise CommandError(f'تعذر قراءة الملف: {exc}')
        except ValueError as exc:
            raise CommandError(f'الملف ليس JSON صالحاً: {exc}')

        if not state:
            raise CommandError('الملف لا يحتوي على بيانات.')

        has_data = Customer.objects.exists() or Unit.objects.exists() or Safe.objects.exists()
        if has_data and not options['force']:
            raise CommandError('قاعدة البيانات تحتوي على بيانات بالفعل. استخدم --force للاستيراد.')

        self.stdout.write(self.style.SUCCESS('جاري استيراد البيانات...'))
        counts = LegacyStateImporter(state).run()

        for key, value in counts.items():
            self.stdout.write(f'   {key}: {value}')
        self.stdout.write(self.style.SUCCESS('✅ تم الاستيراد بنجاح'))
