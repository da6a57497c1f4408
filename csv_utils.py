import csv
import re
from io import StringIO
from typing import Sequence

from records import Transaction

EXPORT_HEADER = [
    "Date",
    "Type",
    "Amount",
    "Currency",
    "Category",
    "Account",
    "Description",
    "Notes",
    "PaymentType",
]


def sanitize_csv_value(value: str) -> str:
    """
    Sanitize CSV values to prevent formula injection by prefixing dangerous patterns with tab.
    """
    if not value or value.strip() == "":
        return ""

    value = value.strip()

    if value.startswith(("=", "+", "-", "@", "\t", "\r")):
        return "\t" + value

    for pattern in (r"^cmd\s*", r"^powershell\s*", r"^http[s]?://"):
        if re.match(pattern, value, re.IGNORECASE):
            return "\t" + value

    return value


def export_transactions(transactions: Sequence[Transaction]) -> str:
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_HEADER)
    for txn in transactions:
        writer.writerow(
            [
                txn.date.isoformat(),
                txn.type.value,
                f"{txn.amount:.2f}",
                txn.currency,
                sanitize_csv_value(txn.category),
                sanitize_csv_value(txn.account),
                sanitize_csv_value(txn.description),
                sanitize_csv_value(txn.notes),
                txn.payment_type.value if txn.payment_type else "",
            ]
        )
    return output.getvalue()
