import json
import os
import tempfile
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from ..models import Contract, Customer, Safe, Unit
from .helpers import create_safe
from .test_legacy import legacy_state


class CheckDataIntegrityCommandTestCase(TestCase):

    def _run(self):
        out = StringIO()
        call_command('check_data_integrity', stdout=out)
        return out.getvalue()

    def test_clean_database(self):
        create_safe(balance='500')
        self.assertIn('لا توجد أخطاء في البيانات', self._run())

    def test_balance_mismatch_reported(self):
        safe = create_safe(balance='500')
        Safe.objects.filter(pk=safe.pk).update(balance=600)
        self.assertIn('لا يساوي المحسوب', self._run())

    def test_one_cent_mismatch_reported(self):
        """فرق قرش واحد بين الرصيد والحركات يظهر كخطأ"""
        safe = create_safe(balance='500')
        Safe.objects.filter(pk=safe.pk).update(balance=Decimal('500.01'))
        self.assertIn('لا يساوي المحسوب', self._run())


class SeedDemoCommandTestCase(TestCase):

    def test_seed_demo(self):
        """البيانات التجريبية تمر بفحص التكامل بدون أخطاء"""
        call_command('seed_demo', units=3, seed=1, stdout=StringIO())

        self.assertEqual(Unit.objects.count(), 3)
        self.assertEqual(Contract.objects.count(), 2)
        self.assertEqual(Safe.objects.count(), 3)
        for unit in Unit.objects.all():
            self.assertEqual(unit.get_partners_total_percent(), 100)

        out = StringIO()
        call_command('check_data_integrity', stdout=out)
        self.assertIn('لا توجد أخطاء في البيانات', out.getvalue())

    def test_clear_option(self):
        call_command('seed_demo', units=3, seed=1, stdout=StringIO())
        call_command('seed_demo', units=3, seed=2, clear=True, stdout=StringIO())
        self.assertEqual(Unit.objects.count(), 3)


class ImportLegacyStateCommandTestCase(TestCase):

    def _write(self, content):
        handle = tempfile.NamedTemporaryFile('w', suffix='.json', delete=False, encoding='utf-8')
        with handle:
            handle.write(content)
        self.addCleanup(os.remove, handle.name)
        return handle.name

    def test_import(self):
        path = self._write(json.dumps({'estate_pro_final_v3': json.dumps(legacy_state())}))
        out = StringIO()
        call_command('import_legacy_state', path, stdout=out)

        self.assertIn('تم الاستيراد بنجاح', out.getvalue())
        self.assertEqual(Customer.objects.count(), 1)
        self.assertEqual(Contract.objects.count(), 1)

    def test_existing_data_requires_force(self):
        create_safe('خزنة قائمة')
        path = self._write(json.dumps(legacy_state()))
        with self.assertRaises(CommandError):
            call_command('import_legacy_state', path, stdout=StringIO())

        call_command('import_legacy_state', path, force=True, stdout=StringIO())
        self.assertEqual(Unit.objects.count(), 1)

    def test_invalid_file(self):
        with self.assertRaises(CommandError):
            call_command('import_legacy_state', self._write('not json'), stdout=StringIO())
        with self.assertRaises(CommandError):
            call_command('import_legacy_state', '/nonexistent/state.json', stdout=StringIO())


class MigrationsTestCase(TestCase):

    def test_models_match_migrations(self):
        """لا توجد تغييرات في النماذج بدون ملف ترحيل"""
        out = StringIO()
        call_command('makemigrations', 'estate', check=True, dry_run=True, stdout=out)
        self.assertIn('No changes detected', out.getvalue())
