"""
User-facing response catalog.

One fixed message per outcome. Every error kind raised by the parsers,
resolvers and store maps to exactly one entry here.
"""

from datetime import datetime
from enum import Enum

from core.exceptions import DateTimeErrorKind, ParseErrorKind, RecipientErrorKind
from core.models import MissingField, ScheduledJob
from utils.timezone import to_offset


class ResponseType(str, Enum):
    SUCCESS_SCHEDULE = "SUCCESS_SCHEDULE"
    SUCCESS_UPDATE = "SUCCESS_UPDATE"
    ERROR_INVALID_FORMAT = "ERROR_INVALID_FORMAT"
    ERROR_MISSING_RECIPIENT = "ERROR_MISSING_RECIPIENT"
    ERROR_MISSING_DATETIME = "ERROR_MISSING_DATETIME"
    ERROR_MISSING_MESSAGE = "ERROR_MISSING_MESSAGE"
    ERROR_INVALID_PHONE = "ERROR_INVALID_PHONE"
    ERROR_CONTACT_NOT_FOUND = "ERROR_CONTACT_NOT_FOUND"
    ERROR_INVALID_DATETIME = "ERROR_INVALID_DATETIME"
    ERROR_INVALID_HOUR = "ERROR_INVALID_HOUR"
    ERROR_PAST_DATETIME = "ERROR_PAST_DATETIME"
    ERROR_INVALID_MESSAGE = "ERROR_INVALID_MESSAGE"
    ERROR_LIMIT_REACHED = "ERROR_LIMIT_REACHED"
    ERROR_INTERNAL = "ERROR_INTERNAL"


# Conversation (natural-language) replies
MISSING_TIME_MESSAGE = "Entiendo tu mensaje, pero necesito que me indiques la hora."
MISSING_DATE_MESSAGE = "Entiendo tu mensaje, pero necesito que me indiques el día."
MISSING_PHONE_MESSAGE = (
    "Necesito que me indiques el número de teléfono con código de país "
    "para poder agendar el mensaje (ejemplo: +56912345678)."
)
INVALID_MESSAGE = (
    "No pude entender el mensaje. Por favor, intenta de nuevo con un mensaje "
    "que incluya la fecha y el contenido."
)

# Edit replies
NO_MESSAGE_TO_EDIT = (
    "No encontré ningún mensaje que coincida con tu solicitud. "
    "Por favor, sé más específico."
)
INVALID_UPDATE = (
    "No pude entender qué cambios quieres hacer. Por favor, especifica el nuevo "
    "contenido, hora o número de teléfono."
)

# View replies
NO_MESSAGES = "No tienes mensajes programados pendientes."
NO_MORE_MESSAGES = "No hay más mensajes programados para mostrar."
INVALID_VIEW_REQUEST = (
    "No pude entender tu solicitud. Puedes preguntarme 'qué mensajes tengo?' "
    "para ver tus mensajes programados."
)
MORE_MESSAGES_AVAILABLE = "➕ Hay {count} mensajes más. Puedes decirme 'ver más' para continuar."
ERROR_FETCHING_MESSAGES = (
    "Lo siento, hubo un error al obtener tus mensajes. "
    "Por favor, intenta de nuevo más tarde."
)
SHOWING_MESSAGES_HEADER = "📬 Estos son tus mensajes programados:"
SHOWING_MORE_MESSAGES_HEADER = "📬 Aquí tienes más mensajes:"
TOTAL_MESSAGES_SUMMARY = "📊 Total de mensajes programados: {count}"

_DATETIME_EXAMPLES = (
    "- 2024-12-25 10:30\n"
    "- 09:30 (para hoy)\n"
    "- mañana 15:45\n"
    "- próximo lunes 08:00\n"
    "- mañana 00:00 (o 24:00 para medianoche)"
)

_WEEKDAY_NAMES = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")
_MONTH_NAMES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio", "julio",
    "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)

PARSE_ERROR_RESPONSES = {
    ParseErrorKind.INVALID_FORMAT: ResponseType.ERROR_INVALID_FORMAT,
    ParseErrorKind.MISSING_RECIPIENT: ResponseType.ERROR_MISSING_RECIPIENT,
    ParseErrorKind.MISSING_DATETIME: ResponseType.ERROR_MISSING_DATETIME,
    ParseErrorKind.MISSING_MESSAGE: ResponseType.ERROR_MISSING_MESSAGE,
}

RECIPIENT_ERROR_RESPONSES = {
    RecipientErrorKind.INVALID_PHONE: ResponseType.ERROR_INVALID_PHONE,
    RecipientErrorKind.CONTACT_NOT_FOUND: ResponseType.ERROR_CONTACT_NOT_FOUND,
}

DATETIME_ERROR_RESPONSES = {
    DateTimeErrorKind.INVALID_FORMAT: ResponseType.ERROR_INVALID_DATETIME,
    DateTimeErrorKind.INVALID_HOUR: ResponseType.ERROR_INVALID_HOUR,
    DateTimeErrorKind.PAST_DATE: ResponseType.ERROR_PAST_DATETIME,
}

MISSING_FIELD_RESPONSES = {
    MissingField.TIME: MISSING_TIME_MESSAGE,
    MissingField.DATE: MISSING_DATE_MESSAGE,
    MissingField.PHONE: MISSING_PHONE_MESSAGE,
}


def format_offset(offset_minutes: int) -> str:
    """Render a UTC offset as 'UTC-04:00'."""
    sign = "-" if offset_minutes < 0 else "+"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"UTC{sign}{hours:02d}:{minutes:02d}"


def format_local_datetime(dt: datetime, offset_minutes: int) -> str:
    """
    Render an aware UTC datetime in the issuer's wall-clock, in Spanish.

    Example: 'miércoles 25 de diciembre de 2024, 10:30 (UTC-04:00)'
    """
    local = to_offset(dt, offset_minutes)
    return (
        f"{_WEEKDAY_NAMES[local.weekday()]} {local.day} de {_MONTH_NAMES[local.month - 1]} "
        f"de {local.year}, {local:%H:%M} ({format_offset(offset_minutes)})"
    )


def format_message(
    response_type: ResponseType,
    *,
    recipient: str | None = None,
    date_time: str | None = None,
    content: str | None = None,
    current_count: int | None = None,
    limit: int | None = None,
    error: str | None = None,
) -> str:
    """Format the catalog message for an outcome."""
    if response_type is ResponseType.SUCCESS_SCHEDULE:
        return (
            "✅ Mensaje programado con éxito\n"
            f"📱 Para: {recipient}\n"
            f"⏰ Fecha: {date_time}\n"
            f"💬 Mensaje: {content}"
        )

    if response_type is ResponseType.SUCCESS_UPDATE:
        return (
            "✏️ Mensaje actualizado exitosamente\n"
            f"📱 Para: {recipient}\n"
            f"⏰ Fecha: {date_time}\n"
            f"💬 Mensaje: {content}"
        )

    if response_type is ResponseType.ERROR_INVALID_FORMAT:
        return (
            "❌ El comando no tiene el formato correcto. "
            "La fecha/hora y el mensaje deben estar en formato $texto$.\n"
            "Ejemplo: /schedule +56912345678 $mañana 9:00$ $Hola$"
        )

    if response_type is ResponseType.ERROR_MISSING_RECIPIENT:
        return (
            "❌ Falta el número de teléfono del destinatario. Por favor, incluye "
            "un número en formato internacional (ej: +56912345678)"
        )

    if response_type is ResponseType.ERROR_MISSING_DATETIME:
        return (
            "❌ Falta la fecha y hora del mensaje. Por favor, especifica cuándo "
            "enviar el mensaje (ej: mañana 15:30)"
        )

    if response_type is ResponseType.ERROR_MISSING_MESSAGE:
        return "❌ Falta el contenido del mensaje. Por favor, incluye el mensaje que quieres enviar"

    if response_type is ResponseType.ERROR_INVALID_PHONE:
        return (
            f"❌ El número \"{recipient}\" no es válido. Por favor, usa el formato "
            "internacional (ej: +56912345678)"
        )

    if response_type is ResponseType.ERROR_CONTACT_NOT_FOUND:
        return (
            "❌ La resolución de contactos aún no está disponible. Por favor, usa el "
            "número de teléfono con código de país (ej: +56912345678)"
        )

    if response_type is ResponseType.ERROR_INVALID_DATETIME:
        return "❌ El formato de fecha/hora no es válido. Ejemplos válidos:\n" + _DATETIME_EXAMPLES

    if response_type is ResponseType.ERROR_INVALID_HOUR:
        return (
            "❌ La hora especificada no es válida. Usa formato 24 horas "
            "(00:00 a 23:59, o 24:00 para medianoche)."
        )

    if response_type is ResponseType.ERROR_PAST_DATETIME:
        return "⚠️ La fecha y hora especificada ya pasó. Por favor, elige un momento en el futuro."

    if response_type is ResponseType.ERROR_INVALID_MESSAGE:
        return (
            "❌ El contenido del mensaje no es válido. El mensaje debe:\n"
            "- No estar vacío\n"
            "- No exceder 1000 caracteres\n"
            "- Contener texto real (no solo espacios)"
        )

    if response_type is ResponseType.ERROR_LIMIT_REACHED:
        return (
            f"🚫 Has alcanzado el límite de {limit} mensajes programados pendientes "
            f"({current_count}/{limit}). Por favor, espera a que algunos mensajes sean "
            "enviados antes de programar más."
        )

    if response_type is ResponseType.ERROR_INTERNAL:
        return (
            "🔧 Ha ocurrido un error interno. Por favor, intenta nuevamente más tarde."
            + (f"\nDetalle: {error}" if error else "")
        )

    raise ValueError(f"Unknown response type: {response_type}")


def format_confirmation(job: ScheduledJob) -> str:
    """Success reply for a newly created job, in the issuer's local time."""
    return format_message(
        ResponseType.SUCCESS_SCHEDULE,
        recipient=job.recipient,
        date_time=format_local_datetime(job.scheduled_at_utc, job.issuer_utc_offset_minutes),
        content=job.content,
    )


def format_update_confirmation(job: ScheduledJob) -> str:
    return format_message(
        ResponseType.SUCCESS_UPDATE,
        recipient=job.recipient,
        date_time=format_local_datetime(job.scheduled_at_utc, job.issuer_utc_offset_minutes),
        content=job.content,
    )


def format_job_line(index: int, job: ScheduledJob) -> str:
    """One entry of a pending-messages listing."""
    when = format_local_datetime(job.scheduled_at_utc, job.issuer_utc_offset_minutes)
    return f"{index}. ⏰ {when}\n   📱 {job.recipient}\n   💬 {job.content}"
