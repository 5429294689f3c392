import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def clear_cache():
    """Los locks de barrido viven en caché; cada test arranca limpio."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def customer(django_user_model):
    return django_user_model.objects.create_user(
        phone_number="+573001112233",
        email="cliente@example.com",
        first_name="Cliente",
        password="pass1234",
    )


@pytest.fixture
def other_customer(django_user_model):
    return django_user_model.objects.create_user(
        phone_number="+573004445566",
        email="otro.cliente@example.com",
        first_name="Otro Cliente",
        password="pass1234",
    )


@pytest.fixture
def admin_user(django_user_model):
    """Usuario con rol ADMIN."""
    return django_user_model.objects.create_user(
        phone_number="+573157589548",
        email="admin@example.com",
        first_name="Admin",
        role="ADMIN",
        password="pass1234",
    )


@pytest.fixture
def second_admin(django_user_model):
    return django_user_model.objects.create_user(
        phone_number="+573157589549",
        email="admin2@example.com",
        first_name="Admin Dos",
        role="ADMIN",
        password="pass1234",
    )


@pytest.fixture
def supplier_user(django_user_model):
    return django_user_model.objects.create_user(
        phone_number="+573209998877",
        email="ventas@distribuidora.example.com",
        first_name="Proveedor",
        role="SUPPLIER",
        password="pass1234",
    )


@pytest.fixture
def supplier(supplier_user):
    from marketplace.models import Supplier

    return Supplier.objects.create(
        name="Distribuidora Andina",
        email="ventas@distribuidora.example.com",
        user=supplier_user,
    )


@pytest.fixture
def product(db):
    from marketplace.models import Product

    return Product.objects.create(
        name="Sérum Hidratante",
        description="Sérum con ácido hialurónico",
        image_url="https://cdn.example.com/serum.png",
        stock_quantity=10,
        low_stock_threshold=5,
    )


@pytest.fixture
def out_of_stock_product(db):
    from marketplace.models import Product

    return Product.objects.create(
        name="Aceite de Masaje",
        image_url="https://cdn.example.com/aceite.png",
        stock_quantity=0,
    )


@pytest.fixture
def product_with_variants(db):
    from marketplace.models import Product, ProductVariant

    product = Product.objects.create(name="Crema Corporal", low_stock_threshold=3)
    ProductVariant.objects.create(product=product, name="50ml", sku="CREMA-50", stock_quantity=0)
    ProductVariant.objects.create(product=product, name="100ml", sku="CREMA-100", stock_quantity=0)
    product.refresh_from_db()
    return product
