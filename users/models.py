from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.db import models

from core.models import BaseModel


class CustomUserQuerySet(models.QuerySet):
    def active_admins(self):
        """Usuarios marcados como administradores que reciben alertas de inventario."""
        return self.filter(role=CustomUser.Role.ADMIN, is_active=True)


class CustomUserManager(BaseUserManager.from_queryset(CustomUserQuerySet)):
    use_in_migrations = True

    def create_user(self, phone_number, email=None, first_name="", password=None, **extra_fields):
        if not phone_number:
            raise ValueError('El número de teléfono es obligatorio.')

        email = self.normalize_email(email) if email else None
        user = self.model(
            phone_number=phone_number,
            email=email,
            first_name=first_name,
            **extra_fields
        )
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, phone_number, first_name, email=None, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', self.model.Role.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('El superusuario debe tener is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('El superusuario debe tener is_superuser=True.')

        return self.create_user(phone_number, email, first_name, password, **extra_fields)


PHONE_NUMBER_REGEX = RegexValidator(
    regex=r"^\+[1-9]\d{9,14}$",
    message="El número debe estar en formato internacional (+573157589548).",
)


class CustomUser(BaseModel, AbstractBaseUser, PermissionsMixin):
    class Role(models.TextChoices):
        CLIENT = 'CLIENT', 'Cliente'
        VIP = 'VIP', 'Suscriptor VIP'
        STAFF = 'STAFF', 'Trabajador'
        ADMIN = 'ADMIN', 'Administrador'
        SUPPLIER = 'SUPPLIER', 'Proveedor'

    phone_number = models.CharField(
        max_length=15,
        unique=True,
        verbose_name='Número de Teléfono',
        validators=[PHONE_NUMBER_REGEX],
    )
    email = models.EmailField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        verbose_name='Correo Electrónico')
    first_name = models.CharField(max_length=100, verbose_name='Nombre')
    last_name = models.CharField(
        max_length=100, blank=True, verbose_name='Apellido')

    role = models.CharField(
        max_length=10, choices=Role.choices, default=Role.CLIENT, verbose_name='Rol')
    is_active = models.BooleanField(default=True, verbose_name='Activo')
    is_staff = models.BooleanField(
        default=False, verbose_name='Personal del Staff')

    objects = CustomUserManager()

    USERNAME_FIELD = 'phone_number'
    REQUIRED_FIELDS = ['first_name']

    def __str__(self):
        return f"{self.first_name} ({self.phone_number})"

    class Meta:
        verbose_name = 'Usuario'
        verbose_name_plural = 'Usuarios'
        indexes = [
            models.Index(fields=['email'], name='user_email_idx'),
            models.Index(fields=['role', 'is_active'], name='user_role_active_idx'),
        ]

    def clean(self):
        super().clean()
        if self.phone_number:
            digits = self.phone_number.replace("+", "")
            if not digits.isdigit() or len(digits) < 10 or len(digits) > 15:
                raise ValidationError(
                    {'phone_number': 'Número de teléfono inválido. Usa formato internacional (+573157589548).'}
                )

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN

    def get_full_name(self):
        """
        Devuelve el nombre completo, compatible con la API estándar de Django.
        """
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.first_name or self.phone_number
