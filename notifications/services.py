import logging
from collections import Counter, defaultdict

from django.conf import settings
from django.db import transaction
from django.db.models import F

from core.utils import chunked, utc_now, writes_per_batch
from notifications.models import NotificationInbox, UserNotification

logger = logging.getLogger(__name__)


class InboxService:
    """
    Escritura en el buzón de notificaciones y mantenimiento del contador
    de no leídas.

    El contador nunca se lee para luego escribirse: todas las variaciones
    son expresiones F() resueltas por la base de datos, así que dos
    entregas simultáneas al mismo usuario no pierden incrementos.
    """

    # Notificación + incremento del contador del destinatario.
    WRITES_PER_NOTIFICATION = 2

    @staticmethod
    def build(user, notification_type, title, message, link="", payload=None):
        """Instancia sin guardar, para entregarla luego con deliver_many()."""
        return UserNotification(
            user=user,
            notification_type=notification_type,
            title=title,
            message=message,
            link=link or "",
            payload=payload or {},
        )

    @classmethod
    def deliver(cls, user, notification_type, title, message, link="", payload=None):
        notification = cls.build(user, notification_type, title, message, link, payload)
        with transaction.atomic():
            notification.save()
            cls.increment_unread({user.pk: 1})
        return notification

    @classmethod
    def deliver_many(cls, notifications, batch_size=None):
        """
        Guarda notificaciones en bloque. Cada lote es atómico y sus
        escrituras no superan STOCK_BATCH_WRITE_LIMIT.

        Si se invoca dentro de una transacción abierta, los lotes quedan
        como savepoints de esa transacción.
        """
        if batch_size is None:
            batch_size = writes_per_batch(
                settings.STOCK_BATCH_WRITE_LIMIT, cls.WRITES_PER_NOTIFICATION
            )
        created = []
        for batch in chunked(notifications, batch_size):
            with transaction.atomic():
                created.extend(UserNotification.objects.bulk_create(batch))
                cls.increment_unread(Counter(n.user_id for n in batch))
        return created

    @staticmethod
    def increment_unread(counts_by_user):
        """
        Suma `n` al contador de cada usuario de {user_id: n}.

        Los buzones faltantes se crean antes con ignore_conflicts, y los
        usuarios con el mismo incremento comparten un único UPDATE.
        """
        counts_by_user = {uid: n for uid, n in counts_by_user.items() if n}
        if not counts_by_user:
            return
        NotificationInbox.objects.bulk_create(
            [NotificationInbox(user_id=uid) for uid in counts_by_user],
            ignore_conflicts=True,
        )
        users_by_delta = defaultdict(list)
        for uid, delta in counts_by_user.items():
            users_by_delta[delta].append(uid)
        for delta, user_ids in users_by_delta.items():
            NotificationInbox.objects.filter(user_id__in=user_ids).update(
                unread_count=F("unread_count") + delta
            )

    @staticmethod
    def mark_as_read(notification):
        """
        Marca la notificación como leída y descuenta 1 del contador.
        Devuelve False si ya estaba leída. El contador nunca baja de 0.
        """
        read_at = utc_now()
        with transaction.atomic():
            updated = UserNotification.objects.filter(
                pk=notification.pk, is_read=False
            ).update(is_read=True, read_at=read_at)
            if not updated:
                return False
            NotificationInbox.objects.filter(
                user_id=notification.user_id, unread_count__gt=0
            ).update(unread_count=F("unread_count") - 1)

        notification.is_read = True
        notification.read_at = read_at
        return True

    @staticmethod
    def recount(user):
        """Reconstruye el contador desde el buzón. Útil tras fallos parciales."""
        unread = UserNotification.objects.filter(user=user, is_read=False).count()
        NotificationInbox.objects.update_or_create(
            user=user, defaults={"unread_count": unread}
        )
        logger.info("Contador de no leídas recalculado para usuario %s: %d", user.pk, unread)
        return unread

    @staticmethod
    def unread_count(user):
        return (
            NotificationInbox.objects.filter(user=user)
            .values_list("unread_count", flat=True)
            .first()
            or 0
        )
