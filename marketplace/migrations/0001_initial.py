import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=255, verbose_name='Nombre')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='Correo Electrónico')),
                ('is_active', models.BooleanField(default=True, verbose_name='Activo')),
                ('user', models.ForeignKey(blank=True, help_text='Cuenta que recibe los avisos de nuevas órdenes de compra.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='supplier_accounts', to=settings.AUTH_USER_MODEL, verbose_name='Usuario Vinculado')),
            ],
            options={
                'verbose_name': 'Proveedor',
                'verbose_name_plural': 'Proveedores',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('stock_quantity', models.PositiveIntegerField(default=0, verbose_name='Stock')),
                ('track_inventory', models.BooleanField(default=True, help_text='Si es falso, el ítem se considera siempre disponible.', verbose_name='Controlar Inventario')),
                ('low_stock_threshold', models.PositiveIntegerField(blank=True, help_text='Vacío usa el umbral del producto o el valor por defecto.', null=True, verbose_name='Umbral de Stock Bajo')),
                ('auto_reorder', models.BooleanField(default=False, verbose_name='Reposición Automática')),
                ('reorder_status', models.CharField(choices=[('IDLE', 'Sin reposición pendiente'), ('IN_PROGRESS', 'Reposición en curso')], default='IDLE', max_length=16, verbose_name='Estado de Reposición')),
                ('reorder_quantity', models.PositiveIntegerField(blank=True, null=True, verbose_name='Cantidad a Reponer')),
                ('last_reorder_at', models.DateTimeField(blank=True, null=True)),
                ('in_stock', models.BooleanField(default=False, editable=False, verbose_name='Disponible')),
                ('name', models.CharField(max_length=255, verbose_name='Nombre del Producto')),
                ('description', models.TextField(blank=True, verbose_name='Descripción')),
                ('image_url', models.URLField(blank=True, max_length=500, null=True, verbose_name='URL de Imagen Externa')),
                ('has_variants', models.BooleanField(default=False, help_text='Con variantes, el stock propio del producto se ignora.', verbose_name='Tiene Variantes')),
                ('preferred_supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='marketplace.supplier', verbose_name='Proveedor Preferido')),
            ],
            options={
                'verbose_name': 'Producto',
                'verbose_name_plural': 'Productos',
                'ordering': ['-created_at'],
                'abstract': False,
                'indexes': [models.Index(fields=['track_inventory'], name='product_track_inventory_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(('reorder_status', 'IDLE'), ('last_reorder_at__isnull', False), _connector='OR'), name='marketplace_product_reorder_has_timestamp')],
            },
        ),
        migrations.CreateModel(
            name='ProductVariant',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('stock_quantity', models.PositiveIntegerField(default=0, verbose_name='Stock')),
                ('track_inventory', models.BooleanField(default=True, help_text='Si es falso, el ítem se considera siempre disponible.', verbose_name='Controlar Inventario')),
                ('low_stock_threshold', models.PositiveIntegerField(blank=True, help_text='Vacío usa el umbral del producto o el valor por defecto.', null=True, verbose_name='Umbral de Stock Bajo')),
                ('auto_reorder', models.BooleanField(default=False, verbose_name='Reposición Automática')),
                ('reorder_status', models.CharField(choices=[('IDLE', 'Sin reposición pendiente'), ('IN_PROGRESS', 'Reposición en curso')], default='IDLE', max_length=16, verbose_name='Estado de Reposición')),
                ('reorder_quantity', models.PositiveIntegerField(blank=True, null=True, verbose_name='Cantidad a Reponer')),
                ('last_reorder_at', models.DateTimeField(blank=True, null=True)),
                ('in_stock', models.BooleanField(default=False, editable=False, verbose_name='Disponible')),
                ('name', models.CharField(help_text='Ej: 50ml, 100ml, Pack x3', max_length=100, verbose_name='Nombre de la Variante')),
                ('sku', models.CharField(max_length=100, unique=True, verbose_name='SKU')),
                ('preferred_supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='marketplace.supplier', verbose_name='Proveedor Preferido')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='variants', to='marketplace.product', verbose_name='Producto')),
            ],
            options={
                'verbose_name': 'Variante de Producto',
                'verbose_name_plural': 'Variantes de Producto',
                'ordering': ['product__name', 'name'],
                'abstract': False,
                'constraints': [models.CheckConstraint(condition=models.Q(('reorder_status', 'IDLE'), ('last_reorder_at__isnull', False), _connector='OR'), name='marketplace_productvariant_reorder_has_timestamp')],
            },
        ),
        migrations.CreateModel(
            name='PurchaseOrder',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product_name', models.CharField(blank=True, max_length=255)),
                ('variant_name', models.CharField(blank=True, max_length=100)),
                ('quantity', models.PositiveIntegerField(verbose_name='Cantidad')),
                ('status', models.CharField(choices=[('PENDING', 'Pendiente'), ('ORDERED', 'Pedida'), ('SHIPPED', 'Enviada'), ('RECEIVED', 'Recibida'), ('CANCELLED', 'Cancelada')], default='PENDING', max_length=10, verbose_name='Estado')),
                ('auto_generated', models.BooleanField(default=False, verbose_name='Generada Automáticamente')),
                ('received_at', models.DateTimeField(blank=True, null=True)),
                ('stock_applied_at', models.DateTimeField(blank=True, help_text='Momento en que la recepción se sumó al inventario.', null=True)),
                ('product', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='purchase_orders', to='marketplace.product', verbose_name='Producto')),
                ('variant', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='purchase_orders', to='marketplace.productvariant', verbose_name='Variante')),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='purchase_orders', to='marketplace.supplier', verbose_name='Proveedor')),
            ],
            options={
                'verbose_name': 'Orden de Compra',
                'verbose_name_plural': 'Órdenes de Compra',
                'ordering': ['-created_at'],
                'constraints': [models.CheckConstraint(condition=models.Q(('quantity__gt', 0)), name='purchase_order_quantity_positive')],
            },
        ),
        migrations.AddField(
            model_name='product',
            name='last_purchase_order',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='marketplace.purchaseorder'),
        ),
        migrations.AddField(
            model_name='productvariant',
            name='last_purchase_order',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='marketplace.purchaseorder'),
        ),
        migrations.CreateModel(
            name='LowStockAlert',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product_name', models.CharField(max_length=255)),
                ('variant_name', models.CharField(blank=True, max_length=100)),
                ('current_stock', models.PositiveIntegerField()),
                ('threshold', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('NEW', 'Nueva'), ('PROCESSING', 'En proceso'), ('RESOLVED', 'Resuelta')], default='NEW', max_length=12)),
                ('product', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='low_stock_alerts', to='marketplace.product')),
                ('variant', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='low_stock_alerts', to='marketplace.productvariant')),
            ],
            options={
                'verbose_name': 'Alerta de Stock Bajo',
                'verbose_name_plural': 'Alertas de Stock Bajo',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='StockNotificationSubscription',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('status', models.CharField(choices=[('PENDING', 'Pendiente'), ('NOTIFIED', 'Notificada')], default='PENDING', max_length=10, verbose_name='Estado')),
                ('notified_at', models.DateTimeField(blank=True, null=True)),
                ('product', models.ForeignKey(db_constraint=False, on_delete=django.db.models.deletion.DO_NOTHING, related_name='stock_subscriptions', to='marketplace.product', verbose_name='Producto')),
                ('variant', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='stock_subscriptions', to='marketplace.productvariant', verbose_name='Variante')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stock_subscriptions', to=settings.AUTH_USER_MODEL, verbose_name='Usuario')),
            ],
            options={
                'verbose_name': 'Suscripción de Disponibilidad',
                'verbose_name_plural': 'Suscripciones de Disponibilidad',
                'ordering': ['created_at'],
                'indexes': [models.Index(fields=['status', 'product', 'variant'], name='stock_sub_status_target_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(models.Q(('notified_at__isnull', True), ('status', 'PENDING')), models.Q(('notified_at__isnull', False), ('status', 'NOTIFIED')), _connector='OR'), name='stock_subscription_status_matches_notified_at')],
            },
        ),
    ]
