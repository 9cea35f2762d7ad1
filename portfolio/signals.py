from django.db.models.signals import pre_save
from django.dispatch import receiver

from portfolio.models import UtilityReading
from portfolio.services.utility_costs import fill_cost_cache


@receiver(pre_save, sender=UtilityReading)
def utility_reading_fill_cost_cache(sender, instance, raw=False, **kwargs):
    # Only new readings get a cached cost; later edits never rewrite it.
    if raw or instance.pk is not None:
        return
    fill_cost_cache(instance)
