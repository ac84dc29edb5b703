"""Text files written into a new session folder."""

from datetime import datetime
from typing import Optional

from ...models import BookingDetails

README_FILE_NAME = "README.txt"
BOOKING_DETAILS_FILE_NAME = "BOOKING_DETAILS.txt"

NOT_SPECIFIED = "غير محدد"


def _box_line(label: str, value: str) -> str:
    return f"║  {label:<11}{value:<48}║"


def render_readme(client_name: str, session_id: str, date_str: str) -> str:
    border = "═" * 62
    lines = [
        f"╔{border}╗",
        f"║{'Studio Photo Session':^62}║",
        f"╠{border}╣",
        _box_line("Client:", client_name),
        _box_line("Session:", session_id),
        _box_line("Created:", date_str),
        f"╠{border}╣",
        _box_line("Folders:", ""),
        _box_line("", "01_RAW/       Original files from camera"),
        _box_line("", "02_SELECTED/  Client selected images"),
        _box_line("", "03_EDITED/    Edited/processed images"),
        _box_line("", "04_FINAL/     Final, ready for print/delivery"),
        f"║{'':62}║",
        _box_line("", "Do not rename or delete these folders."),
        f"╚{border}╝",
    ]
    return "\n".join(lines) + "\n"


def _format_amount(amount: float) -> str:
    return f"{amount:,.0f} د.ع"


def _or_default(value: Optional[object]) -> str:
    if value is None or value == "":
        return NOT_SPECIFIED
    return str(value)


def render_booking_details(
    booking: BookingDetails,
    client_name: str,
    session_id: str,
    date_str: str,
    created_at: Optional[datetime] = None,
) -> str:
    """Arabic booking summary, including the derived balance and payment state."""
    created_at = created_at or datetime.now()
    separator = "═" * 59
    rule = "─" * 59
    details = booking.details
    payment_state = "مدفوع بالكامل" if booking.balance <= 0 else "يوجد متبقي"
    duration = f"{details.duration} دقيقة" if details.duration else NOT_SPECIFIED

    return f"""{separator}
تفاصيل الحجز
{separator}

معلومات الحجز الأساسية:
{rule}
رقم الحجز:          {booking.id or session_id}
العميل:             {client_name}
عنوان الجلسة:       {_or_default(booking.title)}

المواعيد:
{rule}
تاريخ إنشاء المجلد: {date_str}
تاريخ التصوير:      {_or_default(booking.shoot_date)}
وقت التصوير:        {_or_default(details.start_time)}

المعلومات المالية:
{rule}
المبلغ الإجمالي:    {_format_amount(booking.total_amount)}
المبلغ المدفوع:     {_format_amount(booking.paid_amount)}
المتبقي:            {_format_amount(booking.balance)}
حالة الدفع:         {payment_state}

معلومات الاتصال:
{rule}
الهاتف:             {_or_default(booking.client_phone)}
البريد الإلكتروني:  {_or_default(booking.client_email)}

تفاصيل الباكيج:
{rule}
نوع الباكيج:        {_or_default(booking.package_name)}
عدد الصور:          {_or_default(details.photo_count)}
مدة التصوير:        {duration}

ملاحظات إضافية:
{rule}
{details.notes or 'لا توجد ملاحظات'}

معلومات العمل:
{rule}
حالة الحجز:         {_or_default(booking.status)}
المسؤول:            {_or_default(booking.assigned_to_name)}
تم الإنشاء بواسطة:  {_or_default(booking.created_by_name)}

{separator}
تم إنشاء هذا الملف تلقائياً بتاريخ: {created_at.strftime('%Y-%m-%d %H:%M')}
"""
