import django.core.validators
import django.db.models.deletion
import uuid
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('inventory', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Project',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_deleted', models.BooleanField(db_index=True, default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('description', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('PRICE', 'Price quote'), ('PLANNED', 'Planned'), ('IN_PROGRESS', 'In progress'), ('FINISHING', 'Finishing'), ('COMPLETED', 'Completed')], db_index=True, default='PLANNED', max_length=20)),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Sale price', max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('labor_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('misc_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('additional_notes', models.TextField(blank=True)),
                ('measurement_unit', models.CharField(choices=[('inches', 'Inches'), ('cm', 'Centimeters'), ('mm', 'Millimeters')], default='inches', max_length=10)),
                ('share_token', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'projects',
                'indexes': [
                    models.Index(fields=['user', 'is_deleted'], name='idx_project_user_deleted'),
                    models.Index(fields=['status', '-updated_at'], name='idx_project_status'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Board',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('width', models.DecimalField(decimal_places=3, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('thickness', models.DecimalField(decimal_places=3, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('length', models.DecimalField(decimal_places=3, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('lumber', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='boards', to='inventory.lumber')),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='boards', to='projects.project')),
            ],
            options={
                'db_table': 'boards',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='ProjectFinish',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('percentage_used', models.DecimalField(decimal_places=2, default=Decimal('100.00'), max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('finish', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='project_finishes', to='inventory.finish')),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='project_finishes', to='projects.project')),
            ],
            options={
                'db_table': 'project_finishes',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='ProjectSheetGood',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='project_sheet_goods', to='projects.project')),
                ('sheet_good', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='project_sheet_goods', to='inventory.sheetgood')),
            ],
            options={
                'db_table': 'project_sheet_goods',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='ProjectConsumable',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('consumable', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='project_consumables', to='inventory.consumable')),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='project_consumables', to='projects.project')),
            ],
            options={
                'db_table': 'project_consumables',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='CutList',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('width', models.DecimalField(decimal_places=3, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('thickness', models.DecimalField(decimal_places=3, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('length', models.DecimalField(decimal_places=3, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('description', models.CharField(blank=True, max_length=255)),
                ('is_completed', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='cut_lists', to='projects.project')),
            ],
            options={
                'db_table': 'cut_lists',
                'ordering': ['is_completed', '-created_at'],
            },
        ),
    ]
