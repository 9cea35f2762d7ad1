from django.db import migrations

DEFAULT_PAYMENT_METHODS = [
    {"name": "Cash", "description": "Cash payment at the village office."},
    {"name": "Bank transfer", "description": "Transfer to the company bank account."},
    {"name": "Credit card", "description": "Card payment."},
]


def seed_payment_methods(apps, schema_editor):
    PaymentMethod = apps.get_model("portfolio", "PaymentMethod")
    for item in DEFAULT_PAYMENT_METHODS:
        PaymentMethod.objects.update_or_create(
            name=item["name"],
            defaults={
                "description": item["description"],
                "is_active": True,
            },
        )


def unseed_payment_methods(apps, schema_editor):
    PaymentMethod = apps.get_model("portfolio", "PaymentMethod")
    PaymentMethod.objects.filter(
        name__in=[item["name"] for item in DEFAULT_PAYMENT_METHODS],
        payments__isnull=True,
    ).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("portfolio", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_payment_methods, unseed_payment_methods),
    ]
